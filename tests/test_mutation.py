"""Tests for replaying placement actions onto a PDF."""

from __future__ import annotations

import pymupdf
import pytest

from conftest import page_texts
from mypdf.errors import DocumentLoadError
from mypdf.models import ActionList, AddTextAction
from mypdf.mutation import (
    BLACK,
    HANDLERS,
    DrawOp,
    align_offset,
    apply_actions,
    layout_lines,
    parse_color,
    split_lines,
)


def _fixed_width(width: float):
    return lambda text, size: width


def _spans(content: bytes, page_index: int = 0) -> list[dict]:
    doc = pymupdf.open(stream=content, filetype="pdf")
    try:
        data = doc[page_index].get_text("dict")
    finally:
        doc.close()
    return [span for block in data["blocks"] if block["type"] == 0
            for line in block["lines"] for span in line["spans"]]


class TestParseColor:
    def test_six_digits(self) -> None:
        assert parse_color("#ff8000") == pytest.approx((1.0, 128 / 255, 0.0))

    def test_three_digits(self) -> None:
        assert parse_color("#f00") == pytest.approx((1.0, 0.0, 0.0))

    def test_hash_optional(self) -> None:
        assert parse_color("00ff00") == pytest.approx((0.0, 1.0, 0.0))

    @pytest.mark.parametrize("value", [None, "", "zzzzzz", "#12345", "#ff00ff00", "red", "##fff"])
    def test_fallback_to_black(self, value) -> None:
        assert parse_color(value) == BLACK


class TestLayout:
    def test_split_lines(self) -> None:
        assert split_lines("a\r\nb\nc") == ["a", "b", "c"]

    def test_lines_step_down(self) -> None:
        action = AddTextAction(page_index=0, x=10.0, y=500.0, text="a\nb\nc", line_height_points=20.0)
        ops = layout_lines(action, _fixed_width(5))
        assert ops == [DrawOp("a", 10, 500), DrawOp("b", 10, 480), DrawOp("c", 10, 460)]

    def test_default_line_height(self) -> None:
        action = AddTextAction(page_index=0, x=0.0, y=100.0, text="a\nb", font_size_points=10.0)
        assert layout_lines(action, _fixed_width(5))[1].y == pytest.approx(88)

    def test_center_offset(self) -> None:
        action = AddTextAction(page_index=0, x=50.0, y=100.0, text="x", align="center", box_width_points=100.0)
        assert layout_lines(action, _fixed_width(40))[0].x == pytest.approx(80)

    def test_right_offset(self) -> None:
        action = AddTextAction(page_index=0, x=50.0, y=100.0, text="x", align="right", box_width_points=100.0)
        assert layout_lines(action, _fixed_width(40))[0].x == pytest.approx(110)

    def test_align_without_width_ignored(self) -> None:
        action = AddTextAction(page_index=0, x=50.0, y=100.0, text="x", align="right")
        assert layout_lines(action, _fixed_width(40))[0].x == 50

    def test_overflow_not_clipped(self) -> None:
        assert align_offset("center", 100, 140) == 0
        assert align_offset("right", 100, 140) == 0

    def test_left_has_no_offset(self) -> None:
        assert align_offset("left", 100, 40) == 0

    def test_per_line_offsets(self) -> None:
        widths = {"short": 20.0, "much longer": 80.0}
        action = AddTextAction(page_index=0, x=0.0, y=100.0, text="short\nmuch longer",
                               align="right", box_width_points=100.0)
        ops = layout_lines(action, lambda text, size: widths[text])
        assert [op.x for op in ops] == pytest.approx([80, 20])


class TestApplyActions:
    def test_text_drawn_at_baseline(self, letter_pdf: bytes) -> None:
        actions = ActionList([AddTextAction(page_index=0, x=72.0, y=700.0, text="Stamped")])
        spans = [s for s in _spans(apply_actions(letter_pdf, actions)) if s["text"] == "Stamped"]
        assert len(spans) == 1
        # PyMuPDF reports the origin in top-left page space
        assert spans[0]["origin"] == pytest.approx((72, 792 - 700), abs=0.5)
        assert spans[0]["size"] == pytest.approx(12)

    def test_out_of_range_page_skipped(self, letter_pdf: bytes) -> None:
        actions = ActionList([
            AddTextAction(page_index=0, x=72.0, y=700.0, text="Alpha"),
            AddTextAction(page_index=99, x=72.0, y=650.0, text="Ghost"),
            AddTextAction(page_index=0, x=72.0, y=600.0, text="Omega"),
        ])
        texts = page_texts(apply_actions(letter_pdf, actions))
        assert "Alpha" in texts[0]
        assert "Omega" in texts[0]
        assert not any("Ghost" in t for t in texts)

    def test_targets_requested_page(self, letter_pdf: bytes) -> None:
        actions = ActionList([AddTextAction(page_index=1, x=72.0, y=700.0, text="Second")])
        texts = page_texts(apply_actions(letter_pdf, actions))
        assert "Second" not in texts[0]
        assert "Second" in texts[1]

    def test_invalid_color_draws_black(self, letter_pdf: bytes) -> None:
        actions = ActionList([AddTextAction(page_index=0, x=72.0, y=700.0, text="Inky", color_hex="zzzzzz")])
        span = next(s for s in _spans(apply_actions(letter_pdf, actions)) if s["text"] == "Inky")
        assert span["color"] == 0

    def test_color_applied(self, letter_pdf: bytes) -> None:
        actions = ActionList([AddTextAction(page_index=0, x=72.0, y=700.0, text="Red", color_hex="#f00")])
        span = next(s for s in _spans(apply_actions(letter_pdf, actions)) if s["text"] == "Red")
        assert span["color"] == 0xFF0000

    def test_bold_uses_bold_font(self, letter_pdf: bytes) -> None:
        actions = ActionList([
            AddTextAction(page_index=0, x=72.0, y=700.0, text="Heavy", bold=True),
            AddTextAction(page_index=0, x=72.0, y=600.0, text="Light"),
        ])
        spans = {s["text"]: s for s in _spans(apply_actions(letter_pdf, actions))}
        assert "Bold" in spans["Heavy"]["font"]
        assert "Bold" not in spans["Light"]["font"]

    def test_multiline(self, letter_pdf: bytes) -> None:
        actions = ActionList([AddTextAction(page_index=0, x=72.0, y=700.0, text="Top\r\nBottom",
                                            line_height_points=30.0)])
        spans = {s["text"]: s for s in _spans(apply_actions(letter_pdf, actions))}
        assert spans["Bottom"]["origin"][1] - spans["Top"]["origin"][1] == pytest.approx(30, abs=0.5)

    @pytest.mark.parametrize("rotation", [90, 180, 270])
    def test_rotated_page_keeps_text_on_page(self, rotation: int) -> None:
        doc = pymupdf.open()
        try:
            doc.new_page(width=612, height=792).set_rotation(rotation)
            content = doc.tobytes()
        finally:
            doc.close()

        displayed_height = 612 if rotation in (90, 270) else 792
        actions = ActionList([AddTextAction(page_index=0, x=72.0, y=displayed_height - 100.0, text="Rotated")])
        out = pymupdf.open(stream=apply_actions(content, actions), filetype="pdf")
        try:
            page = out[0]
            assert page.rotation == rotation
            # Extraction clips to the page, so text drawn off-page would be missing
            assert "Rotated" in page.get_text()
        finally:
            out.close()

    def test_page_count_unchanged(self, letter_pdf: bytes) -> None:
        actions = ActionList([AddTextAction(page_index=0, x=72.0, y=700.0, text="x")])
        assert len(page_texts(apply_actions(letter_pdf, actions))) == 2

    def test_deterministic(self, letter_pdf: bytes) -> None:
        actions = ActionList([
            AddTextAction(page_index=0, x=72.0, y=700.0, text="Same\nbytes", align="center",
                          box_width_points=200.0, color_hex="#336699"),
            AddTextAction(page_index=1, x=10.0, y=10.0, text="again", bold=True),
        ])
        assert apply_actions(letter_pdf, actions) == apply_actions(letter_pdf, actions)

    def test_source_bytes_untouched(self, letter_pdf: bytes) -> None:
        before = bytes(letter_pdf)
        apply_actions(letter_pdf, ActionList([AddTextAction(page_index=0, x=1.0, y=1.0, text="x")]))
        assert letter_pdf == before

    def test_invalid_pdf(self) -> None:
        with pytest.raises(DocumentLoadError):
            apply_actions(b"this is not a pdf", ActionList([]))


class TestHandlerTable:
    def test_every_kind_has_a_handler(self) -> None:
        from mypdf.models import ACTION_KINDS

        assert set(HANDLERS) == ACTION_KINDS
