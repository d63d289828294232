"""Incremental construction of an s2tilejson metadata document.

The MetadataBuilder accumulates metadata about a growing tile set so
callers never have to pre-compute aggregates. Each registration call
(layer, tile, attribution) updates running aggregates in place:

- the document zoom range is widened by every registered layer
- tile-index bounds are widened per zoom (Web-Mercator) or per face
  and zoom (S2)
- the lon-lat bounds are widened by every registered tile
- tile counters and the set of faces holding data are updated

``commit()`` runs one finalize pass (bounds, center and face list) and
hands back a copy of the document.

Nothing here validates caller input. Out-of-range values propagate into
the document, and when no tile is ever registered the zoom range and
bounds keep their infinite sentinels, so the derived center is NaN.

Example:
    Build metadata for a small tile set:
        >>> from s2tilejson.models import DrawType, LayerMetadata
        >>> from s2tilejson.services.builder import MetadataBuilder

        >>> builder = MetadataBuilder()
        >>> builder.set_name("OSM")
        >>> builder.add_attribution(
        ...     "OpenStreetMap", "https://www.openstreetmap.org/copyright/"
        ... )
        >>> builder.add_layer(
        ...     "water_lines",
        ...     LayerMetadata(
        ...         minzoom=0,
        ...         maxzoom=13,
        ...         draw_types=[DrawType.LINES],
        ...         shape={"class": "string"},
        ...     ),
        ... )
        >>> builder.add_tile_wm(0, 0, 0, (-60, -20, 5, 60))
        >>> builder.add_tile_s2(1, 5, 22, 37, (-120, -7, 44, 72))
        >>> metadata = builder.commit()
        >>> metadata.faces
        [0, 1]
        >>> metadata.centerpoint
        Center(lon=-38.0, lat=26.0, zoom=6)
"""

from __future__ import annotations

import copy
import logging
import math
from typing import TYPE_CHECKING

from s2tilejson.core import config
from s2tilejson.models import (
    Center,
    Face,
    LayerMetadata,
    Metadata,
    TileStats,
    VectorLayer,
)
from s2tilejson.utils import bbox as bbox_utils

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

LonLatBounds = bbox_utils.BBox | tuple[float, float, float, float]


def _as_bbox(bounds: LonLatBounds | Sequence[float]) -> bbox_utils.BBox:
    if isinstance(bounds, bbox_utils.BBox):
        return bounds
    left, bottom, right, top = bounds
    return bbox_utils.BBox(left, bottom, right, top)


class MetadataBuilder:
    """Stateful aggregator owning one in-progress metadata document.

    The builder is not thread safe. To ingest tiles in parallel, give
    each worker its own builder and fold them together with ``merge``.
    """

    def __init__(self, settings: config.Settings | None = None) -> None:
        """Start a document from the configured defaults.

        Args:
            settings: Source of document defaults; the cached settings
                are used when omitted.
        """
        settings = settings or config.get_settings()
        self._lon_lat_bounds = bbox_utils.BBox.empty()
        self._faces: set[int] = set()
        self._metadata = Metadata(
            s2tilejson=settings.s2tilejson_version,
            version=settings.default_version,
            name=settings.default_name,
            scheme=settings.default_scheme,
            description=settings.default_description,
            source_type=settings.default_source_type,
            extension=settings.default_extension,
            encoding=settings.default_encoding,
            minzoom=math.inf,
            maxzoom=-math.inf,
            tilestats=TileStats(),
        )

    def commit(self) -> Metadata:
        """Finalize the document and return a copy of it.

        Derives the lon-lat bounds, the center and the ascending face
        list from everything registered so far. The center longitude and
        latitude are true midpoints; the center zoom is the floored
        midpoint of the zoom range. Calling commit again re-runs the
        derivation on the accumulated state.

        Returns:
            The finalized document. Later registrations do not affect it.
        """
        metadata = self._metadata
        metadata.bounds = self._lon_lat_bounds.copy()
        self._update_center()
        metadata.faces = sorted(self._faces)

        total = metadata.tilestats.total if metadata.tilestats else 0
        if self._lon_lat_bounds.is_empty():
            logger.info(
                "Committing metadata %r with no tiles registered", metadata.name
            )
        logger.debug(
            "Committed metadata %r: %d tile(s) on faces %s",
            metadata.name,
            total,
            metadata.faces,
        )
        return copy.deepcopy(metadata)

    def set_name(self, name: str) -> None:
        self._metadata.name = name

    def set_description(self, description: str) -> None:
        self._metadata.description = description

    def set_version(self, version: str) -> None:
        self._metadata.version = version

    def set_scheme(self, scheme: str) -> None:
        """Set the tile scheme (``fzxy``, ``tfzxy``, ``xyz``, ``txyz``, ``tms``)."""
        self._metadata.scheme = scheme

    def set_type(self, source_type: str) -> None:
        """Set the source type (``vector``, ``raster``, ``raster-dem``, ...)."""
        self._metadata.source_type = source_type

    def set_extension(self, extension: str) -> None:
        self._metadata.extension = extension

    def set_encoding(self, encoding: str) -> None:
        """Set the tile encoding (``none``, ``gzip``, ``br``, ``zstd``)."""
        self._metadata.encoding = encoding

    def add_attribution(self, display_name: str, href: str) -> None:
        """Add or replace the link shown for ``display_name``."""
        self._metadata.attributions[display_name] = href

    def add_layer(self, name: str, layer: LayerMetadata) -> None:
        """Register a layer blueprint and widen the document zoom range.

        The layer replaces any earlier layer with the same name, but a
        legacy vector-layer record is appended on every call, so repeated
        names produce repeated records.

        Args:
            name: Layer name.
            layer: Layer blueprint.
        """
        metadata = self._metadata
        metadata.layers[name] = layer
        metadata.vector_layers.append(
            VectorLayer(
                id=name,
                description=layer.description,
                minzoom=layer.minzoom,
                maxzoom=layer.maxzoom,
            )
        )
        metadata.minzoom = min(metadata.minzoom, layer.minzoom)
        metadata.maxzoom = max(metadata.maxzoom, layer.maxzoom)

    def add_tile_wm(
        self,
        zoom: int,
        x: int,
        y: int,
        ll_bounds: LonLatBounds,
    ) -> None:
        """Register one Web-Mercator tile.

        Args:
            zoom: Zoom of the tile.
            x: Column of the tile.
            y: Row of the tile.
            ll_bounds: Lon-lat bounds of the tile as (left, bottom,
                right, top).
        """
        metadata = self._metadata
        if metadata.tilestats is not None:
            metadata.tilestats.total += 1
        self._faces.add(int(Face.FACE_0))
        tile_bounds = metadata.wmbounds.setdefault(zoom, bbox_utils.BBox.empty())
        tile_bounds.include_point(x, y)
        self._update_lon_lat_bounds(ll_bounds)

    def add_tile_s2(
        self,
        face: Face | int,
        zoom: int,
        x: int,
        y: int,
        ll_bounds: LonLatBounds,
    ) -> None:
        """Register one S2 tile.

        Args:
            face: Face of the tile; ids outside 0-5 count as face 0.
            zoom: Zoom of the tile.
            x: Column of the tile within its face.
            y: Row of the tile within its face.
            ll_bounds: Lon-lat bounds of the tile as (left, bottom,
                right, top).
        """
        face = Face.from_value(face)
        metadata = self._metadata
        if metadata.tilestats is not None:
            metadata.tilestats.increment(face)
        self._faces.add(int(face))
        face_bounds = metadata.s2bounds.setdefault(int(face), {})
        tile_bounds = face_bounds.setdefault(zoom, bbox_utils.BBox.empty())
        tile_bounds.include_point(x, y)
        self._update_lon_lat_bounds(ll_bounds)

    def merge(self, other: MetadataBuilder) -> MetadataBuilder:
        """Fold another builder's aggregates into this one.

        Bounds are merged with the same min/max rule used while
        registering, so merging shards gives the same result as
        registering every tile on one builder. Layers, vector-layer
        records and attributions from ``other`` are added after this
        builder's own; scalar fields stay as set on this builder.

        Args:
            other: Builder whose registrations should be included.

        Returns:
            This builder, for chaining.
        """
        metadata = self._metadata
        incoming = other._metadata

        self._lon_lat_bounds = self._lon_lat_bounds.merge(other._lon_lat_bounds)
        self._faces |= other._faces
        if metadata.tilestats is not None and incoming.tilestats is not None:
            metadata.tilestats.merge(incoming.tilestats)

        for zoom, box in incoming.wmbounds.items():
            current = metadata.wmbounds.get(zoom, bbox_utils.BBox.empty())
            metadata.wmbounds[zoom] = current.merge(box)
        for face, zooms in incoming.s2bounds.items():
            face_bounds = metadata.s2bounds.setdefault(face, {})
            for zoom, box in zooms.items():
                current = face_bounds.get(zoom, bbox_utils.BBox.empty())
                face_bounds[zoom] = current.merge(box)

        metadata.minzoom = min(metadata.minzoom, incoming.minzoom)
        metadata.maxzoom = max(metadata.maxzoom, incoming.maxzoom)
        metadata.attributions.update(incoming.attributions)
        metadata.layers.update(copy.deepcopy(incoming.layers))
        metadata.vector_layers.extend(copy.deepcopy(incoming.vector_layers))
        logger.debug(
            "Merged builder for %r into %r",
            incoming.name,
            metadata.name,
        )
        return self

    def _update_center(self) -> None:
        """Derive the center from the accumulated bounds and zoom range."""
        metadata = self._metadata
        bounds = self._lon_lat_bounds
        metadata.centerpoint = Center(
            lon=(bounds.left + bounds.right) / 2,
            lat=(bounds.bottom + bounds.top) / 2,
            zoom=(metadata.minzoom + metadata.maxzoom) // 2,
        )

    def _update_lon_lat_bounds(self, ll_bounds: LonLatBounds) -> None:
        box = _as_bbox(ll_bounds)
        self._lon_lat_bounds.widen(box.left, box.bottom, box.right, box.top)
