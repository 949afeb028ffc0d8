"""Canvas-pixel <-> PDF-point coordinate transforms.

Canvas space has its origin at the top-left of a rendered page and grows
downward; PDF space has its origin at the bottom-left and grows upward.
Every conversion between the two goes through this module.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Viewport:
    """Render parameters of one page: raster size in px and px-per-point."""

    width_px: float
    height_px: float
    scale: float

    @classmethod
    def for_page_size(cls, width_pt: float, height_pt: float, scale: float) -> "Viewport":
        return cls(width_px=width_pt * scale, height_px=height_pt * scale, scale=scale)


def canvas_to_pdf(viewport: Viewport, x_px: float, y_px: float) -> tuple[float, float]:
    """Map a canvas point to PDF space (flips the y axis around the page height)."""
    return x_px / viewport.scale, (viewport.height_px - y_px) / viewport.scale


def pdf_to_canvas(viewport: Viewport, x_pt: float, y_pt: float) -> tuple[float, float]:
    """Inverse of :func:`canvas_to_pdf`."""
    return x_pt * viewport.scale, viewport.height_px - y_pt * viewport.scale


def to_points(viewport: Viewport, length_px: float) -> float:
    return length_px / viewport.scale


def baseline_from_top(viewport: Viewport, x_px: float, top_px: float,
                      font_size_points: float) -> tuple[float, float]:
    """PDF position of the first baseline for text whose visual top is at ``top_px``.

    Text is drawn from its baseline, so the baseline sits one font size
    below the transformed top edge.
    """
    x_pt, top_pt = canvas_to_pdf(viewport, x_px, top_px)
    return x_pt, top_pt - font_size_points
