"""Pydantic models for placement actions and their validation."""

from __future__ import annotations

import json
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, ValidationError
from pydantic.alias_generators import to_camel

from .config import DEFAULT_FONT_SIZE
from .errors import ActionValidationError

Align = Literal["left", "center", "right"]


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python, no coercion, finite floats only."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        frozen=True,
    )


class AddTextAction(_WireModel):
    kind: Literal["addText"] = "addText"
    page_index: int = Field(ge=0, strict=True)
    x: float = Field(strict=True)
    y: float = Field(strict=True)  # baseline of the first line, PDF space (bottom-left origin)
    text: str = Field(min_length=1, strict=True)
    font_size_points: float = Field(default=DEFAULT_FONT_SIZE, gt=0, strict=True)
    color_hex: str | None = Field(default=None, strict=True)
    bold: bool = Field(default=False, strict=True)
    align: Align | None = None
    box_width_points: float | None = Field(default=None, ge=0, strict=True)
    line_height_points: float | None = Field(default=None, gt=0, strict=True)


# New action kinds join this union and register a handler in mutation.HANDLERS.
PlacementAction = Annotated[Union[AddTextAction], Field(discriminator="kind")]

ACTION_KINDS = frozenset({"addText"})


class ActionList(RootModel[list[PlacementAction]]):
    """Ordered placement actions; list order is replay order."""

    def __iter__(self):
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int):
        return self.root[index]

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


def _describe(error: dict) -> dict:
    loc = error["loc"]
    if loc and loc[0] == "root":
        loc = loc[1:]
    index = loc[0] if loc and isinstance(loc[0], int) else None
    # Tagged-union errors include the tag itself in the location
    field_parts = [str(part) for part in loc[1:] if part not in ACTION_KINDS]
    if error["type"].startswith("union_tag"):
        field = "kind"
    else:
        field = ".".join(field_parts) or None
    return {"index": index, "field": field, "message": error["msg"]}


def parse_action_list(raw: str | bytes) -> ActionList:
    """Parse and validate the ``actions`` form field.

    Accepts a bare JSON array or ``{"actions": [...]}``. Raises
    :class:`ActionValidationError` describing the first violation; nothing is
    coerced or dropped.
    """
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ActionValidationError(f"Actions are not valid JSON: {e}") from e

    if isinstance(payload, dict) and "actions" in payload:
        payload = payload["actions"]
    if not isinstance(payload, list):
        raise ActionValidationError(
            "Actions must be a JSON array",
            details=[{"index": None, "field": None, "message": "Input should be a valid list"}],
        )

    try:
        return ActionList.model_validate(payload)
    except ValidationError as e:
        details = [_describe(err) for err in e.errors()]
        first = details[0]
        where = f"action {first['index']}" if first["index"] is not None else "actions"
        if first["field"]:
            where += f" field '{first['field']}'"
        raise ActionValidationError(
            f"Invalid {where}: {first['message']}", index=first["index"], details=details,
        ) from e
