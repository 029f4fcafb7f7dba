from .canvas import blend_region, draw_hline, draw_vline, fill_rect, new_canvas
from .draw_lines import draw_polyline
from .draw_markers import draw_circle
from .draw_text import draw_text, text_size
from .layers import DirtyState, LayerCache

__all__ = [
    "DirtyState",
    "LayerCache",
    "blend_region",
    "draw_circle",
    "draw_hline",
    "draw_polyline",
    "draw_text",
    "draw_vline",
    "fill_rect",
    "new_canvas",
    "text_size",
]
