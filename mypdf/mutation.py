"""Replay placement actions onto a PDF held in memory."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

import pymupdf

from .config import BOLD_FONT, LINE_HEIGHT_FACTOR, REGULAR_FONT
from .document import open_pdf, to_bytes
from .models import ActionList, AddTextAction

logger = logging.getLogger(__name__)

BLACK = (0.0, 0.0, 0.0)

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_LINE_BREAK_RE = re.compile(r"\r?\n")


def parse_color(color_hex: str | None) -> tuple[float, float, float]:
    """Convert ``#rgb`` / ``#rrggbb`` (``#`` optional) to floats 0-1; black otherwise."""
    if not color_hex:
        return BLACK
    m = _HEX_RE.match(color_hex)
    if m is None:
        return BLACK
    h = m.group(1)
    if len(h) == 3:
        h = "".join(c * 2 for c in h)
    r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    return (r / 255.0, g / 255.0, b / 255.0)


def split_lines(text: str) -> list[str]:
    return _LINE_BREAK_RE.split(text)


def align_offset(align: str | None, box_width: float | None, line_width: float) -> float:
    if box_width is None or align is None:
        return 0.0
    if align == "center":
        return max(0.0, (box_width - line_width) / 2)
    if align == "right":
        return max(0.0, box_width - line_width)
    return 0.0


@dataclass(frozen=True)
class DrawOp:
    """One line of text at its baseline position in PDF space."""

    text: str
    x: float
    y: float


def layout_lines(action: AddTextAction, measure: Callable[[str, float], float]) -> list[DrawOp]:
    """Compute where each line of ``action`` is drawn.

    ``measure(text, size)`` returns the rendered width in points. Lines
    overflowing ``box_width_points`` are not clipped.
    """
    size = action.font_size_points
    line_height = action.line_height_points or size * LINE_HEIGHT_FACTOR
    ops = []
    for i, line in enumerate(split_lines(action.text)):
        offset = 0.0
        if action.align is not None and action.box_width_points is not None:
            offset = align_offset(action.align, action.box_width_points, measure(line, size))
        ops.append(DrawOp(line, action.x + offset, action.y - i * line_height))
    return ops


class FontSet:
    """The two weights available to replay, created once per request."""

    def __init__(self) -> None:
        self.regular = pymupdf.Font(REGULAR_FONT)
        self.bold = pymupdf.Font(BOLD_FONT)

    def pick(self, bold: bool) -> tuple[str, pymupdf.Font]:
        return (BOLD_FONT, self.bold) if bold else (REGULAR_FONT, self.regular)


def _apply_add_text(doc: pymupdf.Document, action: AddTextAction, fonts: FontSet) -> bool:
    if action.page_index >= len(doc):
        logger.warning("Skipping addText: page %d out of range (%d pages)",
                       action.page_index, len(doc))
        return False
    page = doc[action.page_index]
    fontname, font = fonts.pick(action.bold)
    color = parse_color(action.color_hex)

    def measure(text: str, size: float) -> float:
        return font.text_length(text, fontsize=size)

    # Actions address the page as displayed; insert_text wants the unrotated,
    # top-left-origin space, with the text turned to match the page rotation.
    page_height = page.rect.height
    derotate = page.derotation_matrix
    for op in layout_lines(action, measure):
        if not op.text:
            continue
        page.insert_text(
            pymupdf.Point(op.x, page_height - op.y) * derotate,
            op.text,
            fontname=fontname,
            fontsize=action.font_size_points,
            color=color,
            rotate=page.rotation,
        )
    return True


Handler = Callable[[pymupdf.Document, object, FontSet], bool]

HANDLERS: dict[str, Handler] = {
    "addText": _apply_add_text,
}


def replay(doc: pymupdf.Document, actions: ActionList) -> int:
    """Apply ``actions`` to ``doc`` in list order; returns how many were applied."""
    fonts = FontSet()
    applied = 0
    for index, action in enumerate(actions):
        handler = HANDLERS[action.kind]
        if handler(doc, action, fonts):
            applied += 1
            logger.debug("Applied action %d (%s) on page %d", index, action.kind, action.page_index)
    return applied


def apply_actions(content: bytes, actions: ActionList) -> bytes:
    """Load ``content``, replay ``actions`` and return the new document bytes."""
    doc = open_pdf(content)
    try:
        applied = replay(doc, actions)
        logger.info("Applied %d of %d actions", applied, len(actions))
        return to_bytes(doc)
    finally:
        doc.close()
