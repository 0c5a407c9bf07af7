# actuarial_symbols/symbol_tree.py

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ==============================================================================
# SECTION 1: NODE TYPES
# ==============================================================================
class Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class Leaf(Node):
    type: Literal['leaf'] = 'leaf'
    kind: Literal['identifier', 'number', 'operator', 'text'] = 'identifier'
    text: str
    stretchy: Optional[bool] = None


class Empty(Node):
    """An explicit empty slot of a multiscript; never dropped from the tree."""
    type: Literal['empty'] = 'empty'


class ErrorNode(Node): type: Literal['error'] = 'error'; message: str


class Decorated(Node):
    """`mark` is drawn over `base`, or under it when `under` is set."""
    type: Literal['decorated'] = 'decorated'
    base: 'SymbolTree'
    mark: Leaf
    under: bool = False


class SubSup(Node):
    type: Literal['subsup'] = 'subsup'
    base: 'SymbolTree'
    sub: Optional['SymbolTree'] = None
    sup: Optional['SymbolTree'] = None


class PreSup(Node):
    """Four-corner form. Every slot is present; absent corners hold `Empty`."""
    type: Literal['presup'] = 'presup'
    base: 'SymbolTree'
    pre_sub: 'SymbolTree'
    pre_sup: 'SymbolTree'
    post_sub: 'SymbolTree'
    post_sup: 'SymbolTree'


class Row(Node):
    type: Literal['row'] = 'row'
    children: List['SymbolTree'] = Field(default_factory=list)


SymbolTree = Annotated[Union[Leaf, Empty, Decorated, SubSup, PreSup, Row, ErrorNode], Field(discriminator='type')]

for _model in (Decorated, SubSup, PreSup, Row):
    _model.model_rebuild()


# ==============================================================================
# SECTION 2: LEAF BUILDERS
# ==============================================================================
def identifier(text: str) -> Leaf: return Leaf(kind='identifier', text=text)


def number(text: str) -> Leaf: return Leaf(kind='number', text=text)


def operator(text: str, stretchy: Optional[bool] = None) -> Leaf:
    return Leaf(kind='operator', text=text, stretchy=stretchy)


def token_leaf(text: str) -> Leaf:
    """A pure digit sequence becomes a number leaf, anything else an identifier."""
    if text.isascii() and text.isdigit():
        return number(text)
    return identifier(text)


def extract_text(tree: Optional[SymbolTree]) -> str:
    """Recursively collects the leaf text of a tree, in document order, without decoration marks."""
    if tree is None:
        return ""
    if isinstance(tree, Leaf):
        return tree.text
    if isinstance(tree, ErrorNode):
        return tree.message
    if isinstance(tree, Row):
        return "".join(extract_text(child) for child in tree.children)
    if isinstance(tree, Decorated):
        mark = "" if tree.mark.kind == "operator" else tree.mark.text
        return extract_text(tree.base) + mark
    if isinstance(tree, SubSup):
        return extract_text(tree.base) + extract_text(tree.sub) + extract_text(tree.sup)
    if isinstance(tree, PreSup):
        parts = [tree.pre_sub, tree.pre_sup, tree.base, tree.post_sub, tree.post_sup]
        return "".join(extract_text(part) for part in parts)
    return ""
