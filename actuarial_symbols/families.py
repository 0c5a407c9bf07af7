# actuarial_symbols/families.py

from typing import Callable, Dict, Mapping, Optional, Union

from .notation import assemble, decode_precedence, divider, parse_upper_right
from .schemas import AttributeValue, CornerSet
from .symbol_tree import ErrorNode, Row, SubSup, SymbolTree, number, token_leaf

Attributes = Mapping[str, AttributeValue]
FamilyRenderer = Callable[[Attributes], SymbolTree]

# --- Attribute -> effect tables ---
ANNUITY_DECORATIONS = {'immediate': 'none', 'due': 'double-dot', 'continuous': 'macron'}
PAYMENT_DECORATIONS = {'continuous': 'macron'}
INSURANCE_ANGLES = {'term': 'plain', 'endowment': 'plain'}
PROBABILITY_SYMBOLS = {'survival': 'p', 'mortality': 'q'}
UNIMPLEMENTED_MESSAGE = "Component not fully implemented"


def get_attribute(attributes: Attributes, name: str, default: Optional[str] = None) -> Optional[str]:
    """Returns a non-empty string attribute, else `default`."""
    value = attributes.get(name)
    if isinstance(value, str) and value != '':
        return value
    return default


def has_attribute(attributes: Attributes, name: str) -> bool:
    """Boolean presence flag: any value except a missing one or `False` counts."""
    value = attributes.get(name)
    return value is not None and value is not False


def _with_term(age: str, term: Optional[str]) -> str:
    if term and ':' not in age:
        return f"{age}:{term}"
    return age


# --- Family adapters ---
def render_symbol(attributes: Attributes) -> SymbolTree:
    return assemble(CornerSet(
        symbol=get_attribute(attributes, 'symbol', 'x'),
        decoration=get_attribute(attributes, 'decoration', 'none'),
        lower_right=get_attribute(attributes, 'lr'),
        upper_right=get_attribute(attributes, 'ur'),
        lower_left=get_attribute(attributes, 'll'),
        upper_left=get_attribute(attributes, 'ul'),
        wrapper=get_attribute(attributes, 'p'),
        angle_variant=get_attribute(attributes, 'angle', 'with-divider'),
        precedence=decode_precedence(get_attribute(attributes, 'precedence')),
        last_survivor=has_attribute(attributes, 'last-survivor'),
    ))


def render_annuity(attributes: Attributes) -> SymbolTree:
    age = get_attribute(attributes, 'age', 'x')
    kind = get_attribute(attributes, 'type', 'immediate')
    defer = get_attribute(attributes, 'defer')

    lower_right = _with_term(age, get_attribute(attributes, 'term'))
    if defer:
        lower_right = f"{defer}|{lower_right}"
    return assemble(CornerSet(symbol='a', decoration=ANNUITY_DECORATIONS.get(kind, 'none'),
                              lower_right=lower_right, upper_right=get_attribute(attributes, 'frequency'),
                              angle_variant='with-divider'))


def render_insurance(attributes: Attributes) -> SymbolTree:
    age = get_attribute(attributes, 'age', 'x')
    kind = get_attribute(attributes, 'type', 'whole')
    payment = get_attribute(attributes, 'payment', 'eoy')
    term = get_attribute(attributes, 'term')
    frequency = get_attribute(attributes, 'frequency')

    corners = dict(symbol='A', decoration=PAYMENT_DECORATIONS.get(payment, 'none'),
                   lower_right=_with_term(age, term), angle_variant=INSURANCE_ANGLES.get(kind, 'none'))
    if kind == 'pure-endowment':
        return assemble(CornerSet(**corners, lower_left=term or 'n'))
    if kind == 'term':
        # the term-insurance "1" takes the superscript; a frequency goes one level out
        tree = assemble(CornerSet(**corners, upper_right=number('1')))
        if frequency:
            return SubSup(base=tree, sup=parse_upper_right(frequency))
        return tree
    return assemble(CornerSet(**corners, upper_right=frequency))


def _render_wrapped_benefit(attributes: Attributes, wrapper_symbol: str, default_duration: Optional[str]) -> SymbolTree:
    decoration = PAYMENT_DECORATIONS.get(get_attribute(attributes, 'payment', 'annual'), 'none')
    wrapper = assemble(CornerSet(symbol=wrapper_symbol, decoration=decoration,
                                 lower_left=get_attribute(attributes, 'duration', default_duration)))
    return assemble(CornerSet(symbol=get_attribute(attributes, 'benefit', 'A'), decoration=decoration,
                              lower_right=get_attribute(attributes, 'age', 'x'), angle_variant='plain',
                              wrapper=wrapper))


def render_premium(attributes: Attributes) -> SymbolTree:
    return _render_wrapped_benefit(attributes, 'P', None)


def render_reserve(attributes: Attributes) -> SymbolTree:
    return _render_wrapped_benefit(attributes, 'V', 'k')


def render_probability(attributes: Attributes) -> SymbolTree:
    time = get_attribute(attributes, 'time', 't')
    defer = get_attribute(attributes, 'defer')
    lower_left: Union[str, SymbolTree] = time
    if defer:
        lower_left = Row(children=[token_leaf(defer), divider(), token_leaf(time)])
    return assemble(CornerSet(symbol=PROBABILITY_SYMBOLS.get(get_attribute(attributes, 'type', 'survival'), 'p'),
                              lower_right=get_attribute(attributes, 'age', 'x'), lower_left=lower_left,
                              angle_variant='none'))


def render_commutation(attributes: Attributes) -> SymbolTree:
    return assemble(CornerSet(symbol=get_attribute(attributes, 'func', 'D'),
                              lower_right=get_attribute(attributes, 'age', 'x'), angle_variant='none'))


FAMILY_RENDERERS: Dict[str, FamilyRenderer] = {
    'symbol': render_symbol,
    'annuity': render_annuity,
    'insurance': render_insurance,
    'premium': render_premium,
    'reserve': render_reserve,
    'prob': render_probability,
    'commute': render_commutation,
}


def resolve_family(name: Optional[str]) -> Optional[str]:
    """Accepts a family name or its element tag (`act-annuity`)."""
    if not name:
        return None
    key = name.strip().lower().removeprefix('act-')
    return key if key in FAMILY_RENDERERS else None


def render_family(family: Optional[str], attributes: Optional[Attributes] = None) -> SymbolTree:
    key = resolve_family(family)
    if key is None:
        print(f"Warning: unknown symbol family '{family}'.")
        return ErrorNode(message=UNIMPLEMENTED_MESSAGE)
    return FAMILY_RENDERERS[key](attributes or {})
