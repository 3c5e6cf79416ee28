"""core/contracts/documents.py
==========================

Capability contracts for reading paginated content and rendering office
sources. The assembly and signature features depend on these interfaces only;
any implementation honouring them is substitutable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class PageSource(ABC):
    """Gives access to the bytes of one paginated (PDF) container."""

    @abstractmethod
    def load(self) -> bytes:
        """
        Return the container bytes.

        Raises OSError (or a subclass) if the bytes are no longer available.
        """

    def release(self) -> None:
        """Drop any held content. Later ``load`` calls may fail."""


class Rasterizer(ABC):
    """Renders an office document into a paginated (PDF) container."""

    @abstractmethod
    def supports(self, kind: str) -> bool:
        """True if this rasterizer handles sources of *kind* ("word" or "excel")."""

    @abstractmethod
    def render(self, data: bytes, *, kind: str, name: str) -> bytes:
        """Return PDF bytes for the office document *data*."""
