# actuarial_symbols/schemas.py

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .symbol_tree import SymbolTree

AttributeValue = Union[bool, str]


# ==============================================================================
# SECTION 1: NOTATION INPUT SCHEMA
# ==============================================================================
class PrecedenceAnnotation(BaseModel):
    """
    An order-of-death number attached to one life of a joint status.
    Accepts the attribute wire keys `pos`, `num` and the boolean `top`
    (only `top: false` puts the number below the life).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    position: int = Field(..., ge=0, alias='pos', description="Index into the life sequence.")
    order: int = Field(..., ge=1, alias='num')
    side: Literal['top', 'bottom'] = 'top'

    @model_validator(mode='before')
    @classmethod
    def accept_top_flag(cls, data: Any) -> Any:
        if isinstance(data, dict) and 'top' in data and 'side' not in data:
            data = dict(data)
            data['side'] = 'bottom' if data.pop('top') is False else 'top'
        return data


Corner = Union[str, SymbolTree]


class CornerSet(BaseModel):
    """
    Input of the four-corner assembler. Corners given as text are parsed,
    corners given as a SymbolTree are placed as-is.
    """
    model_config = ConfigDict(frozen=True)

    symbol: str
    decoration: str = 'none'
    lower_right: Optional[Corner] = None
    upper_right: Optional[Corner] = None
    lower_left: Optional[Corner] = None
    upper_left: Optional[Corner] = None
    wrapper: Optional[Corner] = None
    angle_variant: str = 'with-divider'
    precedence: List[PrecedenceAnnotation] = Field(default_factory=list)
    last_survivor: bool = False


# ==============================================================================
# SECTION 2: RENDER / EXPORT REQUEST SCHEMA
# ==============================================================================
class SymbolRequest(BaseModel):
    family: str = Field(..., description="Symbol family, e.g. 'annuity' or the element tag 'act-annuity'.")
    attributes: Dict[str, AttributeValue] = Field(default_factory=dict)
    label: Optional[str] = None


class RenderRequest(SymbolRequest):
    format: Literal['mathml', 'omml'] = 'mathml'


class SymbolDocumentModel(BaseModel):
    title: Optional[str] = None
    alignment: Literal['left', 'center', 'right'] = 'center'
    symbols: List[SymbolRequest] = Field(default_factory=list)
