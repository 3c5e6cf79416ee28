"""Typed, layered configuration loader with precedence handling."""
from __future__ import annotations

import os
import configparser
from dataclasses import dataclass, fields
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Optional, Tuple

# --------------------------------------------------------------------------- #
#  Paths & default definitions
# --------------------------------------------------------------------------- #

def _find_project_root() -> Path:
    here = Path(__file__).resolve()
    for parent in here.parents:
        if (parent / "core").is_dir():
            return parent
    return here.parent

PROJECT_ROOT = _find_project_root()
CONFIG_DIR = PROJECT_ROOT / "core" / "config"
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"
MACHINE_INI = CONFIG_DIR / "config.ini"

ENV_PREFIX = "PDFWB_"


_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "Database": {
        "logging": (PROJECT_ROOT / "databases" / "logs.db").as_posix(),
    },
    "Normalize": {
        "compress_images": "true",
        "max_image_dimension": "2000",
        "jpeg_quality": "70",
        "office_page_format": "A4",
        "office_margin": "28.0",
    },
    "Merge": {
        "default_filename": "merged-document.pdf",
        "compress": "true",
    },
    "Stamp": {
        "default_scale": "0.2",
        "corner_margin": "20.0",
        "signed_suffix": "_firmado",
        "archive_name": "documentos_firmados.zip",
    },
    "Compress": {
        "suffix": "-comprimido",
    },
    "Output": {
        "download_dir": (Path.home() / "Downloads").as_posix(),
    },
}


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class DatabaseConfig:
    logging: Path


@dataclass
class NormalizeConfig:
    compress_images: bool = True
    max_image_dimension: int = 2000
    jpeg_quality: int = 70
    office_page_format: str = "A4"
    office_margin: float = 28.0


@dataclass
class MergeConfig:
    default_filename: str = "merged-document.pdf"
    compress: bool = True


@dataclass
class StampConfig:
    default_scale: float = 0.2
    corner_margin: float = 20.0
    signed_suffix: str = "_firmado"
    archive_name: str = "documentos_firmados.zip"


@dataclass
class CompressConfig:
    suffix: str = "-comprimido"


@dataclass
class OutputConfig:
    download_dir: Path


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

def _cp_to_dict(cp: configparser.ConfigParser) -> Dict[str, Dict[str, Any]]:
    data: Dict[str, Dict[str, Any]] = {}
    for section in cp.sections():
        data[section] = {k: v for k, v in cp.items(section)}
    return data


def _apply(target: Dict[str, Dict[str, Any]], source: Dict[str, Dict[str, Any]],
           layer: str, origin: str,
           sources: Dict[Tuple[str, str], Dict[str, str]]) -> None:
    for section, items in source.items():
        sec = target.setdefault(section, {})
        for key, value in items.items():
            sec[key] = value
            sources[(section, key)] = {"layer": layer, "source": origin}


def _cast(value: Any, typ: Any) -> Any:
    # field.type is a string under postponed annotations
    if typ in (Path, "Path"):
        text = str(value)
        return Path(text) if text == ":memory:" else Path(text).expanduser()
    if typ in (bool, "bool"):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if typ in (int, "int"):
        return int(value)
    if typ in (float, "float"):
        return float(value)
    if typ in (str, "str"):
        return str(value)
    return typ(value)


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    kwargs = {}
    for field in fields(cls):
        val = data.get(field.name, field.default)
        kwargs[field.name] = _cast(val, field.type)
    return cls(**kwargs)


def _env_overlays() -> Dict[str, Dict[str, Any]]:
    result: Dict[str, Dict[str, Any]] = {}
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        remainder = env_key[len(ENV_PREFIX):]
        parts = remainder.split("__", 1)
        if len(parts) != 2:
            continue
        section, key = parts
        section = section.title()
        key = key.lower()
        result.setdefault(section, {})[key] = value
    return result


def _user_config_path() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "PDFWorkbench" / "config.ini"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "pdfworkbench" / "config.ini"


def _read_layer(path: Path) -> Dict[str, Dict[str, Any]]:
    cp = configparser.ConfigParser()
    cp.read(path, encoding="utf-8")
    return _cp_to_dict(cp)


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """Facade merging layered configuration with type safety."""

    def __init__(self) -> None:
        self._lock = RLock()
        self.reload()

    # ------------------------------------------------------------------ #
    def reload(self) -> None:
        with self._lock:
            merged: Dict[str, Dict[str, Any]] = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}

            # Layer 0: embedded defaults
            _apply(merged, _DEFAULTS, "code", "embedded", sources)

            # Layer 1: defaults.ini
            if DEFAULTS_INI.exists():
                _apply(merged, _read_layer(DEFAULTS_INI), "defaults.ini", str(DEFAULTS_INI), sources)

            # Layer 2: environment variables
            _apply(merged, _env_overlays(), "env", "os.environ", sources)

            # Layer 3: machine config
            if MACHINE_INI.exists():
                _apply(merged, _read_layer(MACHINE_INI), "machine", str(MACHINE_INI), sources)

            # Layer 4: user overrides
            user_ini = _user_config_path()
            if user_ini.exists():
                _apply(merged, _read_layer(user_ini), "user", str(user_ini), sources)

            self._merged = merged
            self._sources = sources

            self.database = _build_dataclass(DatabaseConfig, merged.get("Database", {}))
            self.normalize = _build_dataclass(NormalizeConfig, merged.get("Normalize", {}))
            self.merge = _build_dataclass(MergeConfig, merged.get("Merge", {}))
            self.stamp = _build_dataclass(StampConfig, merged.get("Stamp", {}))
            self.compress = _build_dataclass(CompressConfig, merged.get("Compress", {}))
            self.output = _build_dataclass(OutputConfig, merged.get("Output", {}))

    # ------------------------------------------------------------------ #
    def get(self, section: str, key: str, *, cast: Callable[[Any], Any] | type = str) -> Any:
        val = self._merged.get(section, {}).get(key)
        if val is None:
            return None
        if isinstance(cast, type):
            return _cast(val, cast)
        return cast(val)

    def meta_source(self, section: str, key: str) -> Dict[str, str] | None:
        return self._sources.get((section, key))


_instance: Optional[ConfigService] = None
_instance_lock = RLock()


def get_config() -> ConfigService:
    """Process-wide ConfigService, created on first use."""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = ConfigService()
        return _instance
