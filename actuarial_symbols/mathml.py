# actuarial_symbols/mathml.py
import os
from typing import Optional

from lxml import etree

from .symbol_tree import Decorated, Empty, ErrorNode, Leaf, PreSup, Row, SubSup, SymbolTree

# --- 1. MathML namespace and constants ---
MATHML_NAMESPACE = "http://www.w3.org/1998/Math/MathML"
MATHML_PREFIX = "{%s}" % MATHML_NAMESPACE
DEFAULT_DISPLAY = os.environ.get("ACT_SYMBOLS_DISPLAY", "inline")
LEAF_TAGS = {'identifier': 'mi', 'number': 'mn', 'operator': 'mo', 'text': 'mtext'}


def _mml_tag(tag_name: str) -> str: return MATHML_PREFIX + tag_name


# --- 2. MathML element builders ---
def _create_leaf_mathml(parent: etree._Element, leaf: Leaf) -> etree._Element:
    el = etree.SubElement(parent, _mml_tag(LEAF_TAGS.get(leaf.kind, 'mi')))
    if leaf.stretchy is not None:
        el.set('stretchy', 'true' if leaf.stretchy else 'false')
    el.text = leaf.text
    return el


def _create_script_mathml(parent: etree._Element, tag: str, *slots: SymbolTree) -> etree._Element:
    el = etree.SubElement(parent, _mml_tag(tag))
    for slot in slots:
        _append_node(el, slot)
    return el


def _create_multiscripts_mathml(parent: etree._Element, node: PreSup) -> etree._Element:
    el = etree.SubElement(parent, _mml_tag('mmultiscripts'))
    for slot in (node.base, node.post_sub, node.post_sup):
        _append_node(el, slot)
    etree.SubElement(el, _mml_tag('mprescripts'))
    for slot in (node.pre_sub, node.pre_sup):
        _append_node(el, slot)
    return el


def _append_node(parent: etree._Element, node: SymbolTree) -> etree._Element:
    if isinstance(node, Leaf):
        return _create_leaf_mathml(parent, node)
    if isinstance(node, Empty):
        return etree.SubElement(parent, _mml_tag('none'))
    if isinstance(node, Row):
        return _create_script_mathml(parent, 'mrow', *node.children)
    if isinstance(node, Decorated):
        return _create_script_mathml(parent, 'munder' if node.under else 'mover', node.base, node.mark)
    if isinstance(node, SubSup):
        if node.sub is not None and node.sup is not None:
            return _create_script_mathml(parent, 'msubsup', node.base, node.sub, node.sup)
        if node.sub is not None:
            return _create_script_mathml(parent, 'msub', node.base, node.sub)
        if node.sup is not None:
            return _create_script_mathml(parent, 'msup', node.base, node.sup)
        return _append_node(parent, node.base)
    if isinstance(node, PreSup):
        return _create_multiscripts_mathml(parent, node)
    if isinstance(node, ErrorNode):
        merror = etree.SubElement(parent, _mml_tag('merror'))
        etree.SubElement(merror, _mml_tag('mtext')).text = node.message
        return merror
    raise TypeError(f"Unsupported symbol tree node: {type(node).__name__}")


# --- 3. Public API ---
def to_mathml(tree: SymbolTree, display: Optional[str] = None) -> etree._Element:
    """
    Serializes a symbol tree into a `<math>` element. A top-level row is
    spliced directly into `<math>` rather than wrapped in an `<mrow>`.
    """
    math = etree.Element(_mml_tag('math'), nsmap={None: MATHML_NAMESPACE})
    math.set('display', display or DEFAULT_DISPLAY)
    children = tree.children if isinstance(tree, Row) else [tree]
    for child in children:
        _append_node(math, child)
    return math


def to_mathml_string(tree: SymbolTree, display: Optional[str] = None, pretty_print: bool = False) -> str:
    return etree.tostring(to_mathml(tree, display), encoding='unicode', pretty_print=pretty_print)
