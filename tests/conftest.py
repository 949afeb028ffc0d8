"""Shared fixtures: small PDFs built in memory."""

from __future__ import annotations

import pymupdf
import pytest


def make_pdf(labels: list[str], width: float = 612, height: float = 792) -> bytes:
    """One page per label, each page showing its label near the top-left."""
    doc = pymupdf.open()
    try:
        for label in labels:
            page = doc.new_page(width=width, height=height)
            page.insert_text((36, 36), label, fontname="helv", fontsize=10)
        return doc.tobytes()
    finally:
        doc.close()


def page_texts(content: bytes) -> list[str]:
    doc = pymupdf.open(stream=content, filetype="pdf")
    try:
        return [page.get_text() for page in doc]
    finally:
        doc.close()


@pytest.fixture
def letter_pdf() -> bytes:
    """Two US-letter pages labelled P1 and P2."""
    return make_pdf(["P1", "P2"])
