from .canvas import RGBA, RasterSurface, apply_opacity, blend_mask, new_canvas, parse_color
from .draw_markers import SYMBOLS, draw_symbol

__all__ = [
    "RGBA",
    "RasterSurface",
    "SYMBOLS",
    "apply_opacity",
    "blend_mask",
    "draw_symbol",
    "new_canvas",
    "parse_color",
]
