"""Conversion of legacy TileJSON documents to the s2tilejson format.

Older tile sets publish a flat TileJSON document: tile URL templates, a
single lon-lat bbox, an optional ``[lon, lat, zoom]`` center and an HTML
attribution string. ``to_metadata`` normalizes such a document into the
canonical ``Metadata`` shape so downstream consumers handle one schema.

The conversion is best effort and never raises. Missing or malformed
fields fall back to defaults, and keys without a canonical equivalent are
carried through unchanged. Structural problems in the result are left for
a schema validator to report.

Example:
    Convert a Mapbox-style TileJSON document:
        >>> from s2tilejson.services.converter import to_metadata
        >>> metadata = to_metadata({
        ...     "tilejson": "3.0.0",
        ...     "name": "OpenStreetMap",
        ...     "attribution": "<a href='https://openstreetmap.org'>OSM</a>",
        ...     "tiles": ["https://a.tile.example.org/{z}/{x}/{y}.mvt"],
        ...     "bounds": [-180, -85, 180, 85],
        ... })
        >>> metadata.attributions
        {'OSM': 'https://openstreetmap.org'}
        >>> metadata.extra["tilejson"]
        '3.0.0'
"""

from __future__ import annotations

import copy
import logging
import re
import types
from collections.abc import Mapping
from typing import Any, TypeVar

from s2tilejson.core import config
from s2tilejson.models import (
    CANONICAL_KEYS,
    Center,
    Encoding,
    Face,
    Metadata,
    SourceType,
    VectorLayer,
    empty_face_bounds,
)
from s2tilejson.utils import bbox as bbox_utils

logger = logging.getLogger(__name__)

CANONICAL_MARKER = "s2tilejson"

# Heuristics for a single anchor tag; this is not an HTML parser.
_HREF_PATTERN = re.compile(r"""href=["']([^"']*)["']""")
_LINK_TEXT_PATTERN = re.compile(r">([^<]*)</a>")


def extract_attribution(markup: Any) -> dict[str, str]:
    """Pull the link text and target out of an anchor-tag attribution.

    Args:
        markup: Attribution string such as
            ``"<a href='https://x.org'>X contributors</a>"``.

    Returns:
        ``{link_text: href}`` when both parts are found, otherwise an
        empty dict.

    Example:
        >>> extract_attribution("<a href='https://x.org'>X contributors</a>")
        {'X contributors': 'https://x.org'}
        >>> extract_attribution("© X contributors")
        {}
    """
    if not isinstance(markup, str):
        return {}
    href = _HREF_PATTERN.search(markup)
    text = _LINK_TEXT_PATTERN.search(markup)
    if href is None or text is None:
        logger.debug("No anchor tag found in attribution %r", markup)
        return {}
    return {text.group(1): href.group(1)}


def _extension_from_tiles(tiles: Any, default: str) -> str:
    """Take the segment after the first dot of the first tile template."""
    if not isinstance(tiles, list) or not tiles or not isinstance(tiles[0], str):
        return default
    parts = tiles[0].split(".")
    if len(parts) < 2:
        return default
    return parts[1]


def _center_from(value: Any) -> Center:
    if (
        isinstance(value, list | tuple)
        and len(value) == 3
        and all(
            isinstance(v, int | float) and not isinstance(v, bool) for v in value
        )
    ):
        lon, lat, zoom = value
        return Center(lon=lon, lat=lat, zoom=zoom)
    return Center()


T = TypeVar("T")


def _pick(
    document: Mapping[str, Any],
    key: str,
    kind: type | types.UnionType,
    default: T,
) -> T:
    """Read ``document[key]`` if it has the expected type, else ``default``."""
    value = document.get(key)
    if isinstance(value, kind) and not isinstance(value, bool):
        return value  # type: ignore[return-value]
    if key in document:
        logger.debug("Ignoring malformed legacy field %r=%r", key, value)
    return default


def to_metadata(
    document: Metadata | Mapping[str, Any] | Any,
    settings: config.Settings | None = None,
) -> Metadata:
    """Normalize a legacy or canonical document into ``Metadata``.

    A ``Metadata`` instance is returned as-is. A mapping that carries the
    ``s2tilejson`` marker is trusted and rehydrated without validation;
    its ``to_dict()`` gives back exactly the received document.
    Anything else is treated as a legacy TileJSON document.

    Args:
        document: The document to normalize.
        settings: Source of the legacy defaults; the cached settings are
            used when omitted.

    Returns:
        The canonical document. Never raises.

    Example:
        Defaults fill in what a minimal legacy document leaves out:
            >>> metadata = to_metadata({"name": "Satellite", "maxzoom": 3})
            >>> metadata.version, metadata.description, metadata.minzoom
            ('1.0.0', '', 0)
    """
    if isinstance(document, Metadata):
        return document
    if not isinstance(document, Mapping):
        logger.warning(
            "Expected a mapping, got %s; converting an empty document",
            type(document).__name__,
        )
        document = {}
    if CANONICAL_MARKER in document:
        metadata = Metadata.from_dict(document)
        metadata.received = copy.deepcopy(dict(document))
        return metadata

    settings = settings or config.get_settings()
    number = int | float
    raw_vector_layers = _pick(document, "vector_layers", list, [])
    vector_layers = []
    for raw_layer in raw_vector_layers:
        layer = VectorLayer.from_dict(raw_layer)
        if layer is None:
            logger.debug("Dropping vector layer entry %r", raw_layer)
            continue
        vector_layers.append(layer)
    bounds = bbox_utils.BBox.from_sequence(document.get("bounds"))
    if bounds is None:
        bounds = bbox_utils.BBox.empty()

    metadata = Metadata(
        s2tilejson=settings.s2tilejson_version,
        version=_pick(document, "version", str, settings.default_version),
        name=_pick(document, "name", str, settings.legacy_default_name),
        scheme=_pick(document, "scheme", str, settings.legacy_default_scheme),
        description=_pick(
            document, "description", str, settings.legacy_default_description
        ),
        source_type=SourceType.VECTOR,
        extension=_extension_from_tiles(
            document.get("tiles"), settings.default_extension
        ),
        encoding=Encoding.NONE,
        faces=[int(Face.FACE_0)],
        bounds=bounds,
        wmbounds={},
        s2bounds=empty_face_bounds(),
        minzoom=_pick(document, "minzoom", number, settings.legacy_default_minzoom),
        maxzoom=_pick(document, "maxzoom", number, settings.legacy_default_maxzoom),
        centerpoint=_center_from(document.get("center")),
        attributions=extract_attribution(document.get("attribution")),
        layers={},
        tilestats=None,
        vector_layers=vector_layers,
        extra={
            key: copy.deepcopy(value)
            for key, value in document.items()
            if key not in CANONICAL_KEYS
        },
    )
    logger.debug(
        "Converted legacy document %r with %d vector layer(s)",
        metadata.name,
        len(vector_layers),
    )
    return metadata
