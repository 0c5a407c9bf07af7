# actuarial_symbols/notation.py
import re
from typing import Callable, Iterable, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .schemas import CornerSet, PrecedenceAnnotation
from .symbol_tree import (Decorated, Empty, Leaf, PreSup, Row, SubSup, SymbolTree, identifier, number, operator,
                          token_leaf)

# --- 1. Notation constants ---
DIVIDER = '|'
COLON = ':'
MACRON = '¯'
DECORATION_MARKS = {'macron': '¯', 'double-dot': '¨', 'ring': '°'}
DECORATION_ALIASES = {'bar': 'macron', 'ddot': 'double-dot', 'dot': 'double-dot'}
ANGLE_VARIANTS = ('with-divider', 'plain', 'none')
ANGLE_VARIANT_ALIASES = {'annuity': 'with-divider', 'insurance': 'plain'}
DURATION_LETTERS = frozenset('nmkt')
ENCLOSING_PAIRS = {'(': ')', '{': '}'}

_DIGITS_RE = re.compile(r'^\d+$')
_DEFERRAL_RE = re.compile(r'\d+\|')
_DEFERRAL_PREFIX_RE = re.compile(r'^\s*(\d+)\|(.*)$', re.S)
_LIFE_RE = re.compile(r'[a-z]', re.I)

_PRECEDENCE_LIST = TypeAdapter(List[PrecedenceAnnotation])

PrecedenceInput = Optional[Iterable[Union[PrecedenceAnnotation, dict]]]


def _warn(message: str, log_callback: Optional[Callable[[str], None]] = None):
    print(message)
    if log_callback:
        log_callback(message)


def divider() -> Leaf: return operator(DIVIDER, stretchy=False)


def overline(base: SymbolTree) -> Decorated: return Decorated(base=base, mark=operator(MACRON))


# --- 2. Precedence decoding ---
def decode_precedence(text: Optional[Union[str, bool]],
                      log_callback: Optional[Callable[[str], None]] = None) -> List[PrecedenceAnnotation]:
    """
    Decodes the flat JSON text of a `precedence` attribute, e.g.
    '[{"pos": 0, "num": 1, "top": true}]'. Anything that does not decode to a
    list of annotations degrades to an empty list.
    """
    if not isinstance(text, str) or not text.strip():
        return []
    try:
        return _PRECEDENCE_LIST.validate_json(text)
    except ValidationError as e:
        _warn(f"Warning: invalid precedence JSON '{text}', ignored ({e.error_count()} error(s)).", log_callback)
        return []


def coerce_precedence(precedence: PrecedenceInput) -> List[PrecedenceAnnotation]:
    if not precedence:
        return []
    items = list(precedence)
    if all(isinstance(item, PrecedenceAnnotation) for item in items):
        return items
    try:
        return _PRECEDENCE_LIST.validate_python(items)
    except ValidationError as e:
        _warn(f"Warning: invalid precedence list ignored ({e.error_count()} error(s)).")
        return []


# --- 3. Decoration Applier / Angle Marker ---
def normalize_decoration(kind: Optional[str]) -> str:
    key = (kind or '').strip().lower()
    key = DECORATION_ALIASES.get(key, key)
    return key if key in DECORATION_MARKS else 'none'


def decorate(symbol: str, kind: Optional[str] = None) -> SymbolTree:
    base = identifier(symbol)
    decoration = normalize_decoration(kind)
    if decoration == 'none':
        return base
    return Decorated(base=base, mark=operator(DECORATION_MARKS[decoration]))


def normalize_angle_variant(variant: Optional[str]) -> str:
    key = (variant or '').strip().lower()
    key = ANGLE_VARIANT_ALIASES.get(key, key)
    return key if key in ANGLE_VARIANTS else 'none'


def is_angle_eligible(token: str) -> bool:
    return token in DURATION_LETTERS or bool(_DIGITS_RE.match(token))


def angle(token: str, variant: Optional[str] = 'with-divider') -> SymbolTree:
    """
    Draws a duration token under the angle overline. `with-divider` puts a
    divider mark after the token inside the overline (annuities), `plain`
    draws the overline alone (insurances). Ineligible tokens stay plain leaves.
    """
    token = token.strip()
    variant = normalize_angle_variant(variant)
    if variant == 'none' or not is_angle_eligible(token):
        return token_leaf(token)
    children: List[SymbolTree] = [token_leaf(token)]
    if variant == 'with-divider':
        children.append(divider())
    return overline(Row(children=children))


# --- 4. Status Parser ---
def parse_status(text: str, precedence: PrecedenceInput = None, last_survivor: bool = False) -> SymbolTree:
    text = text or ''
    lives = _LIFE_RE.findall(text)
    if not lives:
        return token_leaf(text)

    if last_survivor:
        return overline(Row(children=[identifier(life) for life in lives]))

    annotations = coerce_precedence(precedence)
    if not annotations:
        if len(lives) == 1:
            return identifier(lives[0])
        return Row(children=[identifier(life) for life in lives])

    # later annotations for the same position override earlier ones
    by_position = {annotation.position: annotation for annotation in annotations}
    children: List[SymbolTree] = []
    for index, life in enumerate(lives):
        annotation = by_position.get(index)
        if annotation is None:
            children.append(identifier(life))
            continue
        children.append(Decorated(base=identifier(life), mark=number(str(annotation.order)),
                                  under=annotation.side == 'bottom'))
    return Row(children=children)


# --- 5. Subscript Composer ---
def _duration_term(token: str, angle_variant: str) -> List[SymbolTree]:
    if token.endswith(DIVIDER):
        return [angle(token[:-1], angle_variant), divider()]
    return [angle(token, angle_variant)]


def _compose_status_and_durations(text: str, angle_variant: str, precedence: List[PrecedenceAnnotation],
                                  last_survivor: bool) -> SymbolTree:
    if COLON not in text:
        return parse_status(text, precedence, last_survivor)
    status_part, *duration_parts = text.split(COLON)
    children: List[SymbolTree] = [parse_status(status_part.strip(), precedence, last_survivor)]
    for part in duration_parts:
        children.append(operator(COLON))
        children.extend(_duration_term(part.strip(), angle_variant))
    return Row(children=children)


def compose_subscript(text: str, angle_variant: Optional[str] = 'none', precedence: PrecedenceInput = None,
                      last_survivor: bool = False) -> SymbolTree:
    """
    Parses a lower-right expression. The divider is read as, in this order:
    a reversionary alternation `x|y` when no digits sit right before it;
    otherwise a leading deferral prefix `60|...` bound to the whole rest;
    otherwise (after a colon) a deferral mark on a duration term `x:5|`.
    """
    text = text or ''
    variant = normalize_angle_variant(angle_variant)
    annotations = coerce_precedence(precedence)

    if DIVIDER in text and not _DEFERRAL_RE.search(text):
        children: List[SymbolTree] = []
        for i, part in enumerate(text.split(DIVIDER)):
            if i > 0:
                children.append(divider())
            children.append(parse_status(part.strip()))
        return Row(children=children)

    prefix = _DEFERRAL_PREFIX_RE.match(text)
    if prefix:
        rest = _compose_status_and_durations(prefix.group(2).strip(), variant, annotations, last_survivor)
        return Row(children=[number(prefix.group(1)), divider(), rest])

    return _compose_status_and_durations(text, variant, annotations, last_survivor)


def parse_upper_right(text: Optional[str]) -> Optional[SymbolTree]:
    """`(m)` and `{m}` keep their brackets as operators around the content."""
    if not text:
        return None
    if len(text) >= 2 and ENCLOSING_PAIRS.get(text[0]) == text[-1]:
        return Row(children=[operator(text[0]), token_leaf(text[1:-1]), operator(text[-1])])
    return token_leaf(text)


# --- 6. Four-Corner Assembler ---
def _corner(value, parse: Callable[[str], Optional[SymbolTree]]) -> Optional[SymbolTree]:
    if value is None or value == '':
        return None
    if isinstance(value, str):
        return parse(value)
    return value


def _slot(tree: Optional[SymbolTree]) -> SymbolTree:
    return Empty() if tree is None else tree


def assemble(corners: CornerSet) -> SymbolTree:
    base = decorate(corners.symbol, corners.decoration)
    lower_right = _corner(corners.lower_right,
                          lambda text: compose_subscript(text, corners.angle_variant, corners.precedence,
                                                         corners.last_survivor))
    upper_right = _corner(corners.upper_right, parse_upper_right)
    lower_left = _corner(corners.lower_left, token_leaf)
    upper_left = _corner(corners.upper_left, token_leaf)

    if lower_left is not None or upper_left is not None:
        tree = PreSup(base=base, pre_sub=_slot(lower_left), pre_sup=_slot(upper_left),
                      post_sub=_slot(lower_right), post_sup=_slot(upper_right))
    elif lower_right is not None or upper_right is not None:
        tree = SubSup(base=base, sub=lower_right, sup=upper_right)
    else:
        tree = base

    wrapper = _corner(corners.wrapper, identifier)
    if wrapper is not None:
        tree = Row(children=[wrapper, operator('('), tree, operator(')')])
    return tree
