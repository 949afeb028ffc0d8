"""Turn canvas-space text boxes into PDF-space placement actions."""

from __future__ import annotations

from typing import Iterable, Mapping

from .boxes import TextBox
from .config import DEFAULT_FONT_SIZE, LINE_HEIGHT_FACTOR
from .geometry import Viewport, baseline_from_top, to_points
from .models import ActionList, AddTextAction


def box_to_action(box: TextBox, viewport: Viewport) -> AddTextAction:
    size = box.font_size_points
    x, y = baseline_from_top(viewport, box.rect.x, box.rect.y, size)
    return AddTextAction(
        page_index=box.page_number - 1,
        x=x,
        y=y,
        text=box.text,
        font_size_points=size,
        color_hex=box.color_hex,
        bold=box.bold,
        align=box.align,
        box_width_points=to_points(viewport, box.rect.width),
        line_height_points=size * LINE_HEIGHT_FACTOR,
    )


def export_actions(boxes: Iterable[TextBox], viewports: Mapping[int, Viewport]) -> ActionList:
    """One action per non-blank box, in collection order.

    Boxes on pages that were never rendered have no viewport and are left out.
    """
    actions = []
    for box in boxes:
        if not box.text.strip():
            continue
        viewport = viewports.get(box.page_number)
        if viewport is None:
            continue
        actions.append(box_to_action(box, viewport))
    return ActionList(actions)


def action_from_click(viewport: Viewport, page_number: int, x: float, y: float, text: str,
                      font_size_points: float = DEFAULT_FONT_SIZE,
                      color_hex: str | None = None, bold: bool = False) -> AddTextAction:
    """Single-click placement: the click marks the top-left of the text."""
    x_pt, y_pt = baseline_from_top(viewport, x, y, font_size_points)
    return AddTextAction(
        page_index=page_number - 1,
        x=x_pt,
        y=y_pt,
        text=text,
        font_size_points=font_size_points,
        color_hex=color_hex,
        bold=bold,
        line_height_points=font_size_points * LINE_HEIGHT_FACTOR,
    )
