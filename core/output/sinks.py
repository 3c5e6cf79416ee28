"""
===============================================================================
Output sinks – direct download folder or interactive "save as"
-------------------------------------------------------------------------------
DownloadSink
    Writes into a fixed folder, never overwriting: NAME.pdf, NAME (2).pdf, ...
SaveAsSink
    Asks a chooser callback (e.g. a Tk "save as" dialog) for the destination.
    A chooser returning None / "" means the user cancelled -> AbortedByUser.
===============================================================================
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Union

from core.contracts.output import OutputSink
from core.exceptions.errors import AbortedByUser
from core.logging.logic.logger import logger

PathLike = Union[str, Path]


def unique_path(out_dir: Path, filename: str) -> Path:
    """Create a file path inside *out_dir* that does not exist yet.

    Example:
        NAME.pdf, NAME (2).pdf, NAME (3).pdf, ...
    """
    candidate = out_dir / filename
    stem, suffix = candidate.stem, candidate.suffix
    i = 2
    while candidate.exists():
        candidate = out_dir / f"{stem} ({i}){suffix}"
        i += 1
    return candidate


def _write(path: Path, data: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_bytes(data)
    tmp.replace(path)
    return path


class DownloadSink(OutputSink):
    """Direct download into *directory*."""

    def __init__(self, directory: PathLike) -> None:
        self.directory = Path(directory).expanduser()

    def save(self, data: bytes, *, suggested_name: str, media_type: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = _write(unique_path(self.directory, suggested_name), data)
        logger.log("Output", "Download", reference_id=target.name,
                   message=f"{len(data)} bytes, {media_type}")
        return target


class SaveAsSink(OutputSink):
    """Interactive destination choice through *chooser(suggested_name, media_type)*."""

    def __init__(self, chooser: Callable[[str, str], Optional[PathLike]]) -> None:
        self._chooser = chooser

    def save(self, data: bytes, *, suggested_name: str, media_type: str) -> Path:
        chosen = self._chooser(suggested_name, media_type)
        if not chosen:
            logger.log("Output", "SaveAsCancelled", reference_id=suggested_name)
            raise AbortedByUser(suggested_name)
        target = _write(Path(chosen).expanduser(), data)
        logger.log("Output", "SaveAs", reference_id=target.name,
                   message=f"{len(data)} bytes, {media_type}")
        return target
