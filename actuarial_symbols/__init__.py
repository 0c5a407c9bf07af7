from .families import FAMILY_RENDERERS, render_family
from .mathml import to_mathml, to_mathml_string
from .notation import angle, assemble, compose_subscript, decode_precedence, decorate, parse_status
from .omml import to_omml
from .schemas import CornerSet, PrecedenceAnnotation
