"""Build and normalize s2tilejson metadata for tiled geospatial data.

This package describes S2 and Web-Mercator tile sets with a single
metadata document. The document is assembled incrementally while tiles
are produced, and older TileJSON documents can be converted into it.

- ``MetadataBuilder`` aggregates layers, tiles and attributions into one
  document, tracking zoom ranges, tile-index bounds per face and zoom,
  lon-lat bounds and tile counts
- ``to_metadata`` normalizes a legacy TileJSON document, filling in
  defaults and extracting the attribution link
- ``validate_shape`` and ``SHAPE_SCHEMA`` describe the grammar for layer
  property shapes

Example:
    >>> from s2tilejson import MetadataBuilder
    >>> builder = MetadataBuilder()
    >>> builder.add_tile_s2(3, 2, 1, 1, (10, 10, 20, 20))
    >>> builder.commit().faces
    [3]
"""

from s2tilejson.models import (
    Center,
    DrawType,
    Encoding,
    Face,
    LayerMetadata,
    Metadata,
    Scheme,
    SourceType,
    TileStats,
    VectorLayer,
)
from s2tilejson.schemas.shape import SHAPE_SCHEMA, shape_errors, validate_shape
from s2tilejson.services.builder import MetadataBuilder
from s2tilejson.services.converter import extract_attribution, to_metadata
from s2tilejson.utils.bbox import BBox

__all__ = [
    "SHAPE_SCHEMA",
    "BBox",
    "Center",
    "DrawType",
    "Encoding",
    "Face",
    "LayerMetadata",
    "Metadata",
    "MetadataBuilder",
    "Scheme",
    "SourceType",
    "TileStats",
    "VectorLayer",
    "extract_attribution",
    "shape_errors",
    "to_metadata",
    "validate_shape",
]
