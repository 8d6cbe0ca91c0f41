from .template import DEFAULT_THRESHOLD, Match, match_template
from .utils import ImageLike, load_image
from .registry import TemplateDef, TemplateRegistry
from .matcher import ImageMatcher

__all__ = [
    "DEFAULT_THRESHOLD",
    "Match",
    "match_template",
    "ImageLike",
    "load_image",
    "TemplateDef",
    "TemplateRegistry",
    "ImageMatcher",
]
