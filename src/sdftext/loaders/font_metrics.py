"""Font metrics loader for pre-baked SDF font descriptions."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


class FontMetricsError(ValueError):
    """Raised when a font description cannot be read, parsed, or turned into a usable font."""


@dataclass(frozen=True)
class FontInfo:
    """Optional header fields of a font description."""

    name: Optional[str] = None
    size: Optional[int] = None
    bold: bool = False
    italic: bool = False
    atlas_width: Optional[int] = None
    atlas_height: Optional[int] = None


@dataclass(frozen=True)
class RawGlyphMetrics:
    """Pixel metrics of one character exactly as described by the font file."""

    width: float
    height: float
    origin_x: float
    origin_y: float
    advance: float


@dataclass
class FontMetrics:
    """Parsed font description: header plus per-character metrics in file order."""

    info: FontInfo
    characters: Dict[str, RawGlyphMetrics] = field(default_factory=dict)


# JSON field -> RawGlyphMetrics attribute
_GLYPH_FIELDS = {
    "width": "width",
    "height": "height",
    "originX": "origin_x",
    "originY": "origin_y",
    "advance": "advance",
}


def load_font_metrics(path: Path | str) -> FontMetrics:
    """
    Load a font description from a JSON file.

    Raises:
        FontMetricsError: If the file is missing, unreadable, or malformed
    """
    font_path = Path(path)
    try:
        with font_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except OSError as exc:
        raise FontMetricsError(f"Failed to open font atlas file: {font_path}") from exc
    except json.JSONDecodeError as exc:
        raise FontMetricsError(f"Invalid JSON in font atlas file {font_path}: {exc}") from exc

    return parse_font_metrics(payload, source=str(font_path))


def parse_font_metrics(payload: Any, source: str = "<memory>") -> FontMetrics:
    """
    Parse an already-decoded font description.

    The ``characters`` object maps single-character keys to ``width``,
    ``height``, ``originX``, ``originY`` and ``advance`` values in pixels.

    Raises:
        FontMetricsError: If the description is malformed
    """
    if not isinstance(payload, Mapping):
        raise FontMetricsError(f"Font description {source} must be a JSON object")

    characters = payload.get("characters")
    if not isinstance(characters, Mapping):
        raise FontMetricsError(f"Font description {source} has no 'characters' object")

    parsed: Dict[str, RawGlyphMetrics] = {}
    for key, data in characters.items():
        if not isinstance(key, str) or len(key) != 1:
            raise FontMetricsError(f"Character key {key!r} in {source} must be a single character")
        parsed[key] = _parse_glyph(key, data, source)

    return FontMetrics(info=_parse_info(payload, source), characters=parsed)


def _parse_glyph(key: str, data: Any, source: str) -> RawGlyphMetrics:
    if not isinstance(data, Mapping):
        raise FontMetricsError(f"Metrics for character {key!r} in {source} must be an object")

    values = {}
    for json_name, attr in _GLYPH_FIELDS.items():
        if json_name not in data:
            raise FontMetricsError(f"Character {key!r} in {source} is missing '{json_name}'")
        value = data[json_name]
        # bool is an int subclass but never a valid metric
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise FontMetricsError(
                f"Character {key!r} in {source} has non-numeric '{json_name}': {value!r}"
            )
        values[attr] = float(value)

    if values["width"] < 0 or values["height"] < 0:
        raise FontMetricsError(f"Character {key!r} in {source} has a negative size")

    return RawGlyphMetrics(**values)


def _parse_info(payload: Mapping[str, Any], source: str) -> FontInfo:
    name = payload.get("name")
    if name is not None and not isinstance(name, str):
        raise FontMetricsError(f"Font name in {source} must be a string, got {name!r}")

    return FontInfo(
        name=name,
        size=_optional_int(payload, "size", source),
        bold=_flag(payload, "bold", source),
        italic=_flag(payload, "italic", source),
        atlas_width=_optional_int(payload, "width", source),
        atlas_height=_optional_int(payload, "height", source),
    )


def _optional_int(payload: Mapping[str, Any], json_name: str, source: str) -> Optional[int]:
    value = payload.get(json_name)
    if value is None:
        return None
    if isinstance(value, bool):
        raise FontMetricsError(f"Header field '{json_name}' in {source} must be an integer, got {value!r}")

    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise FontMetricsError(
            f"Header field '{json_name}' in {source} must be an integer, got {value!r}"
        ) from exc

    if not math.isfinite(number) or not number.is_integer():
        raise FontMetricsError(f"Header field '{json_name}' in {source} must be an integer, got {value!r}")
    return int(number)


def _flag(payload: Mapping[str, Any], json_name: str, source: str) -> bool:
    value = payload.get(json_name, False)
    if not isinstance(value, bool):
        raise FontMetricsError(f"Header field '{json_name}' in {source} must be true or false, got {value!r}")
    return value
