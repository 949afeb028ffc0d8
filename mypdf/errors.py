"""Exception types shared by the services and the HTTP layer."""

from __future__ import annotations


class MyPdfError(Exception):
    """Base class for all MyPDF errors."""


class InputError(MyPdfError):
    """The caller sent something we refuse to process (reported as 400)."""

    def __init__(self, message: str, details: list[dict] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body: dict = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ActionValidationError(InputError):
    """An action list failed schema validation.

    ``index`` is the list position of the first violation, or ``None`` when
    the payload could not be parsed as an action list at all.
    """

    def __init__(self, message: str, index: int | None = None,
                 details: list[dict] | None = None) -> None:
        super().__init__(message, details)
        self.index = index


class MergeInputError(InputError):
    """A merge request did not supply enough documents."""


class DocumentLoadError(InputError):
    """Uploaded bytes could not be opened as a PDF."""
