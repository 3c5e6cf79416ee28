"""Workbench exceptions.

Every failure carries the pipeline stage it happened in, so the caller can show
one message naming that stage. ``AbortedByUser`` is not a failure and is kept
outside the ``WorkbenchError`` hierarchy.
"""
from __future__ import annotations

from typing import Optional


STAGE_NORMALIZE = "normalize"
STAGE_MERGE = "merge"
STAGE_STAMP = "stamp"
STAGE_COMPRESS = "compress"
STAGE_OUTPUT = "output"

_STAGE_LABELS = {
    STAGE_NORMALIZE: "Processing the selected files failed",
    STAGE_MERGE: "Merging the documents failed",
    STAGE_STAMP: "Signing the documents failed",
    STAGE_COMPRESS: "Compressing the document failed",
    STAGE_OUTPUT: "Saving the result failed",
}


class WorkbenchError(Exception):
    """Base exception for all pipeline failures."""

    default_stage = STAGE_NORMALIZE

    def __init__(self, message: str, *, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage or self.default_stage

    def user_message(self) -> str:
        label = _STAGE_LABELS.get(self.stage, "The operation failed")
        return f"{label}: {self}"


class UnsupportedFormat(WorkbenchError):
    """Declared format matches none of the recognized encodings."""


class CorruptSource(WorkbenchError):
    """Source bytes could not be decoded structurally."""


class SourceUnreadable(WorkbenchError):
    """Document content could not be re-read when it was needed."""

    default_stage = STAGE_MERGE


class EmbedFailure(WorkbenchError):
    """Signature asset cannot be embedded into a page."""

    default_stage = STAGE_STAMP


class AbortedByUser(Exception):
    """The user cancelled the destination selection. Not an error."""


def describe_failure(exc: BaseException) -> Optional[str]:
    """
    Human readable, single message for *exc*; None for a user cancellation.
    """
    if isinstance(exc, AbortedByUser):
        return None
    if isinstance(exc, WorkbenchError):
        return exc.user_message()
    return f"The operation failed unexpectedly: {exc}"
