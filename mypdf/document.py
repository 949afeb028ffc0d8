"""Document lifecycle: open PDFs from memory, serialize, and rasterize pages."""

from __future__ import annotations

import asyncio
from functools import partial

import pymupdf

from .config import DEFAULT_RENDER_SCALE, MAX_UPLOAD_SIZE
from .errors import DocumentLoadError, InputError


async def run_sync(fn, *args, **kwargs):
    """Run a blocking function in a thread so it doesn't stall the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(fn, *args, **kwargs))


def check_upload(content: bytes, filename: str | None) -> None:
    """Reject uploads the transport should never hand to PyMuPDF."""
    if not filename or not filename.lower().endswith(".pdf"):
        raise InputError("Only PDF files are accepted", [{"field": "file", "filename": filename}])
    if len(content) == 0:
        raise InputError(f"Empty file: {filename}")
    if len(content) > MAX_UPLOAD_SIZE:
        raise InputError(f"File too large (max {MAX_UPLOAD_SIZE // 1024 // 1024} MB): {filename}")


def open_pdf(content: bytes) -> pymupdf.Document:
    try:
        doc = pymupdf.open(stream=content, filetype="pdf")
    except Exception as e:
        raise DocumentLoadError(f"Invalid PDF: {e}") from e
    if not doc.is_pdf or doc.page_count == 0:
        doc.close()
        raise DocumentLoadError("Invalid PDF: no pages found")
    return doc


def to_bytes(doc: pymupdf.Document) -> bytes:
    """Serialize without refreshing the file ID, so equal inputs give equal bytes."""
    return doc.tobytes(garbage=3, deflate=True, no_new_id=True)


def page_count(content: bytes) -> int:
    doc = open_pdf(content)
    try:
        return len(doc)
    finally:
        doc.close()


def rasterize_page(content: bytes, page_index: int,
                   scale: float = DEFAULT_RENDER_SCALE) -> tuple[bytes, float, float]:
    """Render a page as PNG bytes; also returns the page size in points."""
    doc = open_pdf(content)
    try:
        if page_index < 0 or page_index >= len(doc):
            raise IndexError(f"Page {page_index} out of range")
        page = doc[page_index]
        mat = pymupdf.Matrix(scale, scale)
        pix = page.get_pixmap(matrix=mat)
        return pix.tobytes("png"), page.rect.width, page.rect.height
    finally:
        doc.close()
