"""Concatenate PDFs in a user-chosen order."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

import pymupdf

from .document import open_pdf, to_bytes
from .errors import MergeInputError

logger = logging.getLogger(__name__)


def merge_documents(sources: list[bytes]) -> bytes:
    """Append every page of each source, in order, to one new document."""
    if len(sources) < 2:
        raise MergeInputError("At least 2 PDF files are required for merging")
    out = pymupdf.open()
    try:
        for position, content in enumerate(sources):
            src = open_pdf(content)
            try:
                out.insert_pdf(src)
                logger.debug("Merged source %d (%d pages)", position, len(src))
            finally:
                src.close()
        logger.info("Merged %d documents into %d pages", len(sources), len(out))
        return to_bytes(out)
    finally:
        out.close()


@dataclass
class MergeItem:
    filename: str
    content: bytes
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


class MergeQueue:
    """Ordered list of files waiting to be merged; list position is the ordinal."""

    def __init__(self) -> None:
        self.items: list[MergeItem] = []

    def add(self, filename: str, content: bytes) -> MergeItem:
        item = MergeItem(filename, content)
        self.items.append(item)
        return item

    def move(self, index: int, direction: int) -> bool:
        """Swap item ``index`` one step up (-1) or down (+1); no-op at the ends."""
        target = index + direction
        if direction not in (-1, 1) or not 0 <= index < len(self.items) or not 0 <= target < len(self.items):
            return False
        item = self.items.pop(index)
        self.items.insert(target, item)
        return True

    def remove(self, item_id: str) -> None:
        self.items = [item for item in self.items if item.id != item_id]

    def sources(self) -> list[tuple[str, bytes]]:
        return [(item.filename, item.content) for item in self.items]
