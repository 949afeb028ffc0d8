"""Render every page of a document and keep text boxes on a separate overlay.

Page rasters come from PyMuPDF, produced off the event loop. Text boxes are
never baked into the raster: editing a box only bumps that page's overlay
revision, so typing never costs a page render.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from itertools import count

from .boxes import BoxEditor, TextBox
from .config import DEFAULT_RENDER_SCALE
from .document import page_count, rasterize_page, run_sync
from .geometry import Viewport

logger = logging.getLogger(__name__)


@dataclass
class PageSurface:
    """Where a rendered page ends up: PNG bytes plus the raster size."""

    png: bytes | None = None
    width: int = 0
    height: int = 0
    renders: int = 0

    def paint(self, png: bytes, viewport: Viewport) -> None:
        self.png = png
        self.width = int(viewport.width_px)
        self.height = int(viewport.height_px)
        self.renders += 1


class RenderCoordinator:
    """Per-session render state for one loaded document."""

    def __init__(self, content: bytes, scale: float = DEFAULT_RENDER_SCALE,
                 editor: BoxEditor | None = None) -> None:
        self.content = content
        self.scale = scale
        self.page_count = 0
        self.viewports: dict[int, Viewport] = {}
        self.surfaces: dict[int, PageSurface] = {}
        self.editor = editor if editor is not None else BoxEditor(self.viewports)
        self.editor.viewports = self.viewports
        self.editor.add_listener(self._overlay_changed)
        self.overlay_revisions: dict[int, int] = {}
        self._tokens = count(1)
        self._latest: dict[int, int] = {}
        self._pending: set[asyncio.Task] = set()

    @property
    def page_numbers(self) -> list[int]:
        return list(range(1, self.page_count + 1))

    async def load(self) -> int:
        self.page_count = await run_sync(page_count, self.content)
        logger.info("Loaded document with %d pages", self.page_count)
        return self.page_count

    def register_surface(self, page_number: int, surface: PageSurface) -> asyncio.Task | None:
        """Attach a surface; a render is dispatched once the document is loaded.

        Must be called from the running event loop.
        """
        self.surfaces[page_number] = surface
        if not self.page_count:
            return None
        task = asyncio.get_running_loop().create_task(self.render_page(page_number))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def unregister_surface(self, page_number: int) -> None:
        self.surfaces.pop(page_number, None)

    async def render_page(self, page_number: int) -> bool:
        """Rasterize one page into its surface.

        Returns False when the page has no surface or a newer render of the
        same page was requested while this one was running.
        """
        if page_number not in self.surfaces:
            return False
        token = next(self._tokens)
        self._latest[page_number] = token
        # The first render fixes the page's scale for the session
        scale = self.viewports[page_number].scale if page_number in self.viewports else self.scale
        png, width_pt, height_pt = await run_sync(rasterize_page, self.content, page_number - 1, scale)
        if self._latest.get(page_number) != token:
            logger.debug("Discarding stale render %d of page %d", token, page_number)
            return False
        surface = self.surfaces.get(page_number)
        if surface is None:
            return False
        viewport = Viewport.for_page_size(width_pt, height_pt, scale)
        self.viewports[page_number] = viewport
        surface.paint(png, viewport)
        logger.debug("Rendered page %d at scale %.2f", page_number, scale)
        return True

    async def render_all(self) -> None:
        """Render every registered page concurrently, gating pointer input meanwhile."""
        self.editor.is_rendering = True
        try:
            pages = [n for n in self.page_numbers if n in self.surfaces]
            await asyncio.gather(*(self.render_page(n) for n in pages))
        finally:
            self.editor.is_rendering = False

    async def open(self) -> None:
        """Load the document, give every page a surface and render them all."""
        await self.load()
        for page_number in self.page_numbers:
            self.surfaces.setdefault(page_number, PageSurface())
        await self.render_all()

    def _overlay_changed(self, page_number: int) -> None:
        self.overlay_revisions[page_number] = self.overlay_revisions.get(page_number, 0) + 1

    def overlay(self, page_number: int) -> list[TextBox]:
        return self.editor.boxes_on_page(page_number)
