"""core/contracts/output.py
=======================

Destination contract: the core only supplies bytes and a suggested name, the
sink decides where they end up (direct download folder or "save as").
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class OutputSink(ABC):
    """Writes one finished artifact."""

    @abstractmethod
    def save(self, data: bytes, *, suggested_name: str, media_type: str) -> Path:
        """
        Persist *data* and return the path written.

        Raises ``AbortedByUser`` if the user cancelled the destination choice.
        """
