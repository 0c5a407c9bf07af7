# actuarial_symbols/elements.py
import asyncio
import traceback
from typing import Callable, Dict, Optional

from lxml import etree

from .families import FAMILY_RENDERERS, render_family, resolve_family
from .mathml import to_mathml
from .schemas import AttributeValue
from .symbol_tree import ErrorNode, SymbolTree

DEFAULT_ELEMENTS = {f"act-{family}": family for family in FAMILY_RENDERERS}
LOAD_ANNOUNCEMENT = "🎯 Actuarial Symbols library loaded"

ELEMENT_REGISTRY: Dict[str, str] = {}
_announced = False


def define(tag: str, family: str):
    """Binds an element tag to a symbol family. A tag can be defined only once."""
    key = resolve_family(family)
    if key is None:
        raise ValueError(f"Unknown symbol family '{family}'.")
    if tag in ELEMENT_REGISTRY:
        raise ValueError(f"Element '{tag}' has already been defined.")
    ELEMENT_REGISTRY[tag] = key


def register_default_elements(logger: Optional[Callable[[str], None]] = None) -> Dict[str, str]:
    global _announced
    for tag, family in DEFAULT_ELEMENTS.items():
        if tag not in ELEMENT_REGISTRY:
            define(tag, family)
    if not _announced:
        _announced = True
        print(LOAD_ANNOUNCEMENT)
        if logger:
            logger(LOAD_ANNOUNCEMENT)
    return dict(ELEMENT_REGISTRY)


class ActuarialElement:
    """
    One notation element on a page. Attributes may keep changing until the
    first render; `connected_callback` defers that render by one loop tick
    and the `rendered` flag makes every later trigger a no-op.
    """

    def __init__(self, tag: str, attributes: Optional[Dict[str, AttributeValue]] = None):
        self.tag = tag
        self.family = ELEMENT_REGISTRY.get(tag)
        self.attributes: Dict[str, AttributeValue] = dict(attributes or {})
        self.rendered = False
        self.tree: Optional[SymbolTree] = None
        self.output: Optional[etree._Element] = None

    def set_attribute(self, name: str, value: AttributeValue = True) -> 'ActuarialElement':
        self.attributes[name] = value
        return self

    def remove_attribute(self, name: str) -> 'ActuarialElement':
        self.attributes.pop(name, None)
        return self

    def get_attribute(self, name: str) -> Optional[str]:
        value = self.attributes.get(name)
        return value if isinstance(value, str) else None

    def has_attribute(self, name: str) -> bool:
        value = self.attributes.get(name)
        return value is not None and value is not False

    def connected_callback(self) -> asyncio.Handle:
        """Must be called from a running event loop."""
        return asyncio.get_running_loop().call_soon(self.render)

    def render(self) -> etree._Element:
        if self.rendered:
            return self.output
        try:
            tree = render_family(self.family, self.attributes)
        except Exception as e:
            print(f"\n[ERROR] Rendering <{self.tag}> failed: {type(e).__name__}: {e}")
            traceback.print_exc()
            tree = ErrorNode(message=f"{type(e).__name__}: {e}")
        self.tree = tree
        self.output = to_mathml(tree)
        self.rendered = True
        return self.output

    def to_markup(self) -> str:
        return etree.tostring(self.render(), encoding='unicode')


def create_element(tag: str, attributes: Optional[Dict[str, AttributeValue]] = None) -> ActuarialElement:
    if tag not in ELEMENT_REGISTRY:
        raise ValueError(f"Element '{tag}' is not defined.")
    return ActuarialElement(tag, attributes)
