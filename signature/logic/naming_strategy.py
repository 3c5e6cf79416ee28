from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Protocol


@dataclass(frozen=True)
class NamingContext:
    source_name: str


class NamingStrategy(Protocol):
    def propose_name(self, ctx: NamingContext) -> str: ...


class DefaultSuffixStrategy:
    """Default: contrato.docx -> contrato_firmado.pdf"""

    def __init__(self, suffix: str = "_firmado") -> None:
        self.suffix = suffix

    def propose_name(self, ctx: NamingContext) -> str:
        name = ctx.source_name or "document"
        dot = name.rfind(".")
        stem = name[:dot] if dot > 0 else name
        return f"{stem}{self.suffix}.pdf"


def unique_source_names(names: Iterable[str]) -> List[str]:
    """
    Disambiguate repeated source names before suffixing, so archive entries
    never collide: "a.pdf", "a.pdf" -> "a.pdf", "a (2).pdf".
    """
    taken = set()
    out: List[str] = []
    for name in names:
        dot = name.rfind(".")
        stem, ext = (name[:dot], name[dot:]) if dot > 0 else (name, "")
        candidate, n = name, 1
        while candidate.lower() in taken:
            n += 1
            candidate = f"{stem} ({n}){ext}"
        taken.add(candidate.lower())
        out.append(candidate)
    return out
