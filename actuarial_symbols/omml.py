# actuarial_symbols/omml.py
from typing import Optional

from lxml import etree

from .notation import MACRON
from .symbol_tree import Decorated, Empty, ErrorNode, Leaf, PreSup, Row, SubSup, SymbolTree

# --- 1. OMML namespaces and constants ---
M_NAMESPACE = "http://schemas.openxmlformats.org/officeDocument/2006/math"
W_NAMESPACE = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
M_PREFIX = "{%s}" % M_NAMESPACE
W_PREFIX = "{%s}" % W_NAMESPACE
OMML_NSMAP = {'m': M_NAMESPACE}

# Word draws accents from combining characters
ACCENT_CHARS = {'¯': '\u0304', '¨': '\u0308', '°': '\u030a'}


def _m_tag(tag_name: str) -> str: return M_PREFIX + tag_name


# --- 2. OMML element builders ---
def _create_run_omml(parent: etree._Element, text: str, is_text: bool = False) -> etree._Element:
    mr = etree.SubElement(parent, _m_tag('r'))
    if is_text:
        rpr = etree.SubElement(mr, _m_tag('rPr'))
        sty = etree.SubElement(rpr, _m_tag('sty'))
        sty.set(_m_tag('val'), 'p')
    mt = etree.SubElement(mr, _m_tag('t'))
    if text.startswith(' ') or text.endswith(' '): mt.set(W_PREFIX + 'space', 'preserve')
    mt.text = text
    return mr


def _create_accent_omml(parent: etree._Element, base: SymbolTree, char: str) -> etree._Element:
    macc = etree.SubElement(parent, _m_tag('acc'))
    maccPr = etree.SubElement(macc, _m_tag('accPr'))
    mchr = etree.SubElement(maccPr, _m_tag('chr'))
    mchr.set(_m_tag('val'), ACCENT_CHARS.get(char, char))
    _append_node(etree.SubElement(macc, _m_tag('e')), base)
    return macc


def _create_bar_omml(parent: etree._Element, base: SymbolTree) -> etree._Element:
    mbar = etree.SubElement(parent, _m_tag('bar'))
    mbarPr = etree.SubElement(mbar, _m_tag('barPr'))
    mpos = etree.SubElement(mbarPr, _m_tag('pos'))
    mpos.set(_m_tag('val'), 'top')
    _append_node(etree.SubElement(mbar, _m_tag('e')), base)
    return mbar


def _create_limit_omml(parent: etree._Element, base: SymbolTree, limit: SymbolTree, under: bool) -> etree._Element:
    mlim_el = etree.SubElement(parent, _m_tag('limLow' if under else 'limUpp'))
    _append_node(etree.SubElement(mlim_el, _m_tag('e')), base)
    _append_node(etree.SubElement(mlim_el, _m_tag('lim')), limit)
    return mlim_el


def _create_scripts_omml(parent: etree._Element, base: SymbolTree, sub: Optional[SymbolTree],
                         sup: Optional[SymbolTree]) -> etree._Element:
    if sub is not None and sup is not None:
        tag = 'sSubSup'
    elif sub is not None:
        tag = 'sSub'
    else:
        tag = 'sSup'
    mscript = etree.SubElement(parent, _m_tag(tag))
    _append_node(etree.SubElement(mscript, _m_tag('e')), base)
    if sub is not None:
        _append_node(etree.SubElement(mscript, _m_tag('sub')), sub)
    if sup is not None:
        _append_node(etree.SubElement(mscript, _m_tag('sup')), sup)
    return mscript


def _create_prescripts_omml(parent: etree._Element, node: PreSup) -> etree._Element:
    msPre = etree.SubElement(parent, _m_tag('sPre'))
    _append_node(etree.SubElement(msPre, _m_tag('sub')), node.pre_sub)
    _append_node(etree.SubElement(msPre, _m_tag('sup')), node.pre_sup)
    me = etree.SubElement(msPre, _m_tag('e'))
    post_sub = None if isinstance(node.post_sub, Empty) else node.post_sub
    post_sup = None if isinstance(node.post_sup, Empty) else node.post_sup
    if post_sub is None and post_sup is None:
        _append_node(me, node.base)
    else:
        _create_scripts_omml(me, node.base, post_sub, post_sup)
    return msPre


def _append_node(parent: etree._Element, node: SymbolTree):
    if isinstance(node, Leaf):
        _create_run_omml(parent, node.text, is_text=node.kind == 'text')
    elif isinstance(node, Empty):
        return
    elif isinstance(node, Row):
        for child in node.children: _append_node(parent, child)
    elif isinstance(node, Decorated):
        if node.under or node.mark.kind != 'operator':
            _create_limit_omml(parent, node.base, node.mark, node.under)
        elif node.mark.text == MACRON and isinstance(node.base, Row):
            _create_bar_omml(parent, node.base)
        else:
            _create_accent_omml(parent, node.base, node.mark.text)
    elif isinstance(node, SubSup):
        if node.sub is None and node.sup is None:
            _append_node(parent, node.base)
        else:
            _create_scripts_omml(parent, node.base, node.sub, node.sup)
    elif isinstance(node, PreSup):
        _create_prescripts_omml(parent, node)
    elif isinstance(node, ErrorNode):
        _create_run_omml(parent, f"[{node.message}]", is_text=True)
    else:
        raise TypeError(f"Unsupported symbol tree node: {type(node).__name__}")


# --- 3. Public API ---
def to_omml(tree: SymbolTree, alignment: str = 'center') -> etree._Element:
    omml_para = etree.Element(_m_tag('oMathPara'), nsmap=OMML_NSMAP)
    omml_para_pr = etree.SubElement(omml_para, _m_tag('oMathParaPr'))
    jc = etree.SubElement(omml_para_pr, _m_tag('jc')); jc.set(_m_tag('val'), alignment)
    omml_math = etree.SubElement(omml_para, _m_tag('oMath'))
    _append_node(omml_math, tree)
    return omml_para


def to_omml_string(tree: SymbolTree, alignment: str = 'center') -> str:
    return etree.tostring(to_omml(tree, alignment), encoding='unicode')
