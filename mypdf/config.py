"""Centralised configuration for MyPDF."""

from __future__ import annotations

# -- Upload limits --
MAX_UPLOAD_SIZE = 50 * 1024 * 1024  # 50 MB

# -- CORS --
ALLOWED_ORIGINS: list[str] = ["*"]

# -- Rendering --
DEFAULT_RENDER_SCALE = 1.5  # canvas px per PDF point

# -- Text defaults --
DEFAULT_FONT_SIZE = 12.0
LINE_HEIGHT_FACTOR = 1.2  # line advance = font_size * this

# -- Base14 fonts used for replay --
REGULAR_FONT = "helv"
BOLD_FONT = "hebo"

# -- New text box defaults --
DEFAULT_BOX_FONT_FAMILY = "Arial"
DEFAULT_BOX_COLOR = "#111111"

# -- Box geometry (canvas px) --
MIN_CREATE_WIDTH = 60
MIN_CREATE_HEIGHT = 32
MIN_RESIZE_WIDTH = 40
MIN_RESIZE_HEIGHT = 24

# -- Output naming --
EDITED_PREFIX = "edited_"
MERGED_FILENAME = "merged.pdf"
