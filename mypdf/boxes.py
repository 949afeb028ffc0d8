"""Text box state: drag-create, move, resize and editing.

``BoxEditor`` is the whole per-session interaction state. It owns the ordered
box list, the single active box, and at most one in-flight pointer
interaction. Canvas bounds come from the page-number -> Viewport mapping the
render coordinator fills in.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, Literal, Mapping

from .config import (
    DEFAULT_BOX_COLOR,
    DEFAULT_BOX_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    MIN_CREATE_HEIGHT,
    MIN_CREATE_WIDTH,
    MIN_RESIZE_HEIGHT,
    MIN_RESIZE_WIDTH,
)
from .geometry import Viewport

logger = logging.getLogger(__name__)

Handle = Literal["nw", "ne", "se", "sw"]
HANDLES: frozenset[str] = frozenset({"nw", "ne", "se", "sw"})

# Fields a text edit may change; geometry goes through move/resize.
EDITABLE_FIELDS = frozenset({"text", "font_family", "font_size_points", "color_hex", "bold", "align"})


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float


@dataclass
class TextBox:
    page_number: int  # 1-based
    rect: Rect
    text: str = ""
    font_family: str = DEFAULT_BOX_FONT_FAMILY
    font_size_points: float = DEFAULT_FONT_SIZE
    color_hex: str = DEFAULT_BOX_COLOR
    bold: bool = False
    align: str = "left"
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True)
class DragRect:
    page_number: int
    origin_x: float
    origin_y: float
    rect: Rect


@dataclass(frozen=True)
class Interaction:
    box_id: str
    kind: Literal["move", "resize"]
    start_x: float
    start_y: float
    start_rect: Rect
    handle: Handle | None = None


def normalize_drag(origin_x: float, origin_y: float, x: float, y: float) -> Rect:
    return Rect(min(origin_x, x), min(origin_y, y), abs(x - origin_x), abs(y - origin_y))


def moved_rect(start: Rect, dx: float, dy: float, canvas_w: float, canvas_h: float) -> Rect:
    """Translate ``start`` by (dx, dy), keeping the whole box on the canvas."""
    x = min(max(0.0, start.x + dx), max(0.0, canvas_w - start.width))
    y = min(max(0.0, start.y + dy), max(0.0, canvas_h - start.height))
    return replace(start, x=x, y=y)


def resized_rect(start: Rect, handle: str, dx: float, dy: float,
                 canvas_w: float, canvas_h: float) -> Rect:
    """Drag one corner handle of ``start`` by (dx, dy).

    North/west edges move the origin and shrink the opposite dimension;
    south/east edges only change the size. The 40x24 floor applies before the
    canvas clamp, and the origin never leaves the canvas.
    """
    x, y, width, height = start.x, start.y, start.width, start.height
    if "n" in handle:
        new_y = max(0.0, min(start.y + dy, start.y + start.height - MIN_RESIZE_HEIGHT))
        height = start.y + start.height - new_y
        y = new_y
    if "s" in handle:
        height = max(MIN_RESIZE_HEIGHT, start.height + dy)
    if "w" in handle:
        new_x = max(0.0, min(start.x + dx, start.x + start.width - MIN_RESIZE_WIDTH))
        width = start.x + start.width - new_x
        x = new_x
    if "e" in handle:
        width = max(MIN_RESIZE_WIDTH, start.width + dx)

    width = min(width, canvas_w - x)
    height = min(height, canvas_h - y)
    return Rect(x, y, width, height)


class BoxEditor:
    """Interaction state machine for the text boxes of one open document."""

    def __init__(self, viewports: Mapping[int, Viewport]) -> None:
        self.viewports = viewports
        self.boxes: list[TextBox] = []
        self.active_id: str | None = None
        self.interaction: Interaction | None = None
        self.drag: DragRect | None = None
        self.placement_mode = False
        self.is_rendering = False
        self._listeners: list[Callable[[int], None]] = []

    # -- observers --

    def add_listener(self, fn: Callable[[int], None]) -> None:
        """Call ``fn(page_number)`` whenever a box on that page changes."""
        self._listeners.append(fn)

    def _changed(self, page_number: int) -> None:
        for fn in self._listeners:
            fn(page_number)

    # -- queries --

    def get(self, box_id: str) -> TextBox | None:
        return next((box for box in self.boxes if box.id == box_id), None)

    @property
    def active_box(self) -> TextBox | None:
        return self.get(self.active_id) if self.active_id else None

    def boxes_on_page(self, page_number: int) -> list[TextBox]:
        return [box for box in self.boxes if box.page_number == page_number]

    @property
    def state(self) -> str:
        if self.interaction is not None:
            return "resizing" if self.interaction.kind == "resize" else "moving"
        if self.drag is not None:
            return "drag_create"
        return "editing" if self.active_id else "idle"

    def _canvas_size(self, page_number: int) -> tuple[float, float]:
        vp = self.viewports[page_number]
        return vp.width_px, vp.height_px

    def _can_start(self) -> bool:
        return not self.is_rendering and self.interaction is None and self.drag is None

    # -- drag-create --

    def set_placement_mode(self, on: bool) -> None:
        self.placement_mode = on
        if not on:
            self.drag = None

    def canvas_pointer_down(self, page_number: int, x: float, y: float) -> bool:
        if not self.placement_mode or not self._can_start():
            return False
        if page_number not in self.viewports:
            return False
        self.drag = DragRect(page_number, x, y, Rect(x, y, 0.0, 0.0))
        return True

    def canvas_pointer_move(self, page_number: int, x: float, y: float) -> None:
        if self.drag is None or self.drag.page_number != page_number:
            return
        canvas_w, canvas_h = self._canvas_size(page_number)
        x = max(0.0, min(canvas_w, x))
        y = max(0.0, min(canvas_h, y))
        self.drag = replace(self.drag, rect=normalize_drag(self.drag.origin_x, self.drag.origin_y, x, y))

    def canvas_pointer_up(self, page_number: int) -> TextBox | None:
        """Promote the drag rectangle to a new active box."""
        if self.drag is None or self.drag.page_number != page_number:
            return None
        drawn = self.drag.rect
        self.drag = None
        rect = Rect(drawn.x, drawn.y,
                    max(MIN_CREATE_WIDTH, drawn.width),
                    max(MIN_CREATE_HEIGHT, drawn.height))
        box = TextBox(page_number=page_number, rect=rect)
        self.boxes.append(box)
        self.active_id = box.id
        logger.debug("Created box %s on page %d at %s", box.id, page_number, rect)
        self._changed(page_number)
        return box

    # -- move / resize --

    def _start(self, box_id: str, kind: str, x: float, y: float,
               handle: Handle | None = None) -> bool:
        if not self._can_start():
            return False
        box = self.get(box_id)
        if box is None:
            return False
        self.interaction = Interaction(box_id, kind, x, y, box.rect, handle)
        self.active_id = box_id
        return True

    def start_move(self, box_id: str, x: float, y: float) -> bool:
        return self._start(box_id, "move", x, y)

    def start_resize(self, box_id: str, handle: Handle, x: float, y: float) -> bool:
        if handle not in HANDLES:
            raise ValueError(f"Unknown resize handle: {handle!r}")
        return self._start(box_id, "resize", x, y, handle)

    def pointer_move(self, x: float, y: float) -> None:
        current = self.interaction
        if current is None:
            return
        box = self.get(current.box_id)
        if box is None or box.page_number not in self.viewports:
            return
        canvas_w, canvas_h = self._canvas_size(box.page_number)
        # Deltas are taken from the interaction start, not the previous event
        dx = x - current.start_x
        dy = y - current.start_y
        if current.kind == "move":
            box.rect = moved_rect(current.start_rect, dx, dy, canvas_w, canvas_h)
        else:
            box.rect = resized_rect(current.start_rect, current.handle, dx, dy, canvas_w, canvas_h)
        self._changed(box.page_number)

    def pointer_up(self) -> None:
        """Global release: ends whatever interaction is in flight.

        A drag released outside its canvas never reaches
        :meth:`canvas_pointer_up` and is discarded here.
        """
        self.interaction = None
        self.drag = None

    # -- editing --

    def activate(self, box_id: str | None) -> None:
        if box_id is not None and self.get(box_id) is None:
            raise KeyError(box_id)
        self.active_id = box_id

    def update_box(self, box_id: str, **patch) -> TextBox:
        unknown = set(patch) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")
        box = self.get(box_id)
        if box is None:
            raise KeyError(box_id)
        for name, value in patch.items():
            setattr(box, name, value)
        self._changed(box.page_number)
        return box

    def remove_box(self, box_id: str) -> None:
        box = self.get(box_id)
        if box is None:
            return
        self.boxes.remove(box)
        if self.active_id == box_id:
            self.active_id = None
        if self.interaction is not None and self.interaction.box_id == box_id:
            self.interaction = None
        self._changed(box.page_number)

    def clear(self) -> None:
        pages = sorted({box.page_number for box in self.boxes})
        self.boxes.clear()
        self.active_id = None
        self.interaction = None
        for page_number in pages:
            self._changed(page_number)
