"""Data models for the canonical tile metadata document.

This module defines the structures that make up an s2tilejson document:
the enumerations persisted on the wire (faces, draw types, schemes,
source types, encodings), the per-layer descriptions, tile statistics,
and the ``Metadata`` document itself.

Values are plain dataclasses. Optional fields are explicit ``None``
attributes; they are only dropped when serializing the layer records
and unknown tile counts, where consumers expect absent keys.

Example:
    Describe a layer and serialize a document:
        >>> from s2tilejson.models import DrawType, LayerMetadata, Metadata
        >>> layer = LayerMetadata(
        ...     minzoom=0,
        ...     maxzoom=13,
        ...     draw_types=[DrawType.LINES],
        ...     shape={"class": "string", "offset": "f64"},
        ... )
        >>> doc = Metadata(layers={"water_lines": layer})
        >>> doc.to_dict()["layers"]["water_lines"]["drawTypes"]
        [2]
"""

from __future__ import annotations

import copy
import dataclasses
import enum
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from s2tilejson.utils import bbox as bbox_utils

if TYPE_CHECKING:
    from s2tilejson.schemas.shape import Shape

Number = int | float
ZoomBounds = dict[int, bbox_utils.BBox]

FACES: tuple[int, ...] = (0, 1, 2, 3, 4, 5)


class Face(enum.IntEnum):
    """One of the six S2 cube faces. Web-Mercator data lives on face 0."""

    FACE_0 = 0
    FACE_1 = 1
    FACE_2 = 2
    FACE_3 = 3
    FACE_4 = 4
    FACE_5 = 5

    @classmethod
    def from_value(cls, value: Any) -> Face:
        """Map a raw face id to a Face, folding unknown ids into face 0."""
        try:
            return cls(value)
        except (TypeError, ValueError):
            return cls.FACE_0


class DrawType(enum.IntEnum):
    """Geometry kind of a layer.

    The integer codes are persisted in serialized documents and must
    never be renumbered.
    """

    POINTS = 1
    LINES = 2
    POLYGONS = 3
    POINTS_3D = 4
    LINES_3D = 5
    POLYGONS_3D = 6
    RASTER = 7
    GRID = 8

    @classmethod
    def from_value(cls, value: Any) -> DrawType:
        """Map a raw draw-type code, treating unknown codes as points."""
        try:
            return cls(value)
        except (TypeError, ValueError):
            return cls.POINTS


class Scheme(enum.StrEnum):
    """Tile addressing scheme.

    S2 data defaults to ``fzxy`` and Web-Mercator data to ``xyz``. A ``t``
    prefix marks the scheme as time sensitive. ``tms`` is the outdated
    flipped-y variant.
    """

    FZXY = "fzxy"
    TFZXY = "tfzxy"
    XYZ = "xyz"
    TXYZ = "txyz"
    TMS = "tms"

    @classmethod
    def from_value(cls, value: Any) -> Scheme:
        try:
            return cls(value)
        except ValueError:
            return cls.TMS


class SourceType(enum.StrEnum):
    """Kind of data the tiles carry. ``overlay`` marks an old engine."""

    VECTOR = "vector"
    JSON = "json"
    RASTER = "raster"
    RASTER_DEM = "raster-dem"
    SENSOR = "sensor"
    MARKERS = "markers"
    OVERLAY = "overlay"
    UNKNOWN = "unknown"

    @classmethod
    def from_value(cls, value: Any) -> SourceType:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class Encoding(enum.StrEnum):
    """Compression applied to each tile."""

    NONE = "none"
    GZIP = "gzip"
    BROTLI = "br"
    ZSTD = "zstd"

    @property
    def code(self) -> int:
        """Numeric wire code of the encoding."""
        return _ENCODING_CODES[self]

    @classmethod
    def from_value(cls, value: Any) -> Encoding:
        """Map an encoding name or wire code, defaulting to no encoding."""
        if isinstance(value, int) and not isinstance(value, bool):
            for encoding, code in _ENCODING_CODES.items():
                if code == value:
                    return encoding
            return cls.NONE
        if value == "gz":
            return cls.GZIP
        try:
            return cls(value)
        except ValueError:
            return cls.NONE


_ENCODING_CODES: dict[Encoding, int] = {
    Encoding.NONE: 0,
    Encoding.GZIP: 1,
    Encoding.BROTLI: 2,
    Encoding.ZSTD: 3,
}


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _number_or(value: Any, default: Number) -> Number:
    return value if _is_number(value) else default


def _count_or_zero(value: Any) -> int:
    if _is_number(value) and math.isfinite(value):
        return int(value)
    return 0


def _str_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _zoom_bounds_from(value: Any) -> ZoomBounds:
    """Parse a ``{"<zoom>": [l, b, r, t]}`` map, skipping bad entries."""
    result: ZoomBounds = {}
    if not isinstance(value, Mapping):
        return result
    for key, raw_box in value.items():
        try:
            zoom = int(key)
        except (TypeError, ValueError, OverflowError):
            continue
        box = bbox_utils.BBox.from_sequence(raw_box)
        if box is not None:
            result[zoom] = box
    return result


def _zoom_bounds_to(bounds: ZoomBounds) -> dict[str, list[Number]]:
    return {str(zoom): box.to_list() for zoom, box in sorted(bounds.items())}


def empty_face_bounds() -> dict[int, ZoomBounds]:
    """Return per-face zoom bounds with every face present and empty."""
    return {face: {} for face in FACES}


@dataclasses.dataclass
class TileStats:
    """Running tile counters per face, plus a grand total.

    Web-Mercator tiles only bump ``total``; S2 tiles bump both their
    face and ``total``.

    Attributes:
        total: Number of tiles registered overall.
        faces: Number of S2 tiles registered on each face.
    """

    total: int = 0
    faces: dict[int, int] = dataclasses.field(
        default_factory=lambda: dict.fromkeys(FACES, 0)
    )

    def get(self, face: Face | int) -> int:
        return self.faces[Face.from_value(face)]

    def increment(self, face: Face | int) -> None:
        """Count one more tile on ``face`` and in the grand total."""
        self.faces[Face.from_value(face)] += 1
        self.total += 1

    def merge(self, other: TileStats) -> None:
        """Add another set of counters into this one."""
        self.total += other.total
        for face in FACES:
            self.faces[face] += other.faces.get(face, 0)

    def to_dict(self) -> dict[str, int]:
        document = {"total": self.total}
        document.update({str(face): self.faces[face] for face in FACES})
        return document

    @classmethod
    def from_dict(cls, value: Any) -> TileStats | None:
        if not isinstance(value, Mapping):
            return None
        stats = cls(total=_count_or_zero(value.get("total")))
        for face in FACES:
            stats.faces[face] = _count_or_zero(value.get(str(face)))
        return stats


@dataclasses.dataclass
class Center:
    """Display center of the data: a lon-lat point and a zoom."""

    lon: Number = 0
    lat: Number = 0
    zoom: Number = 0

    def to_dict(self) -> dict[str, Number]:
        return {"lon": self.lon, "lat": self.lat, "zoom": self.zoom}

    @classmethod
    def from_dict(cls, value: Any) -> Center:
        if not isinstance(value, Mapping):
            return cls()
        return cls(
            lon=_number_or(value.get("lon"), 0),
            lat=_number_or(value.get("lat"), 0),
            zoom=_number_or(value.get("zoom"), 0),
        )


@dataclasses.dataclass
class LayerMetadata:
    """Blueprint of one vector layer, declared before its data is built.

    Attributes:
        minzoom: Lowest zoom at which the layer is available.
        maxzoom: Highest zoom at which the layer is available.
        draw_types: Geometry kinds found in the layer.
        shape: Schema of the feature properties.
        description: Optional human-readable description.
        m_shape: Optional schema of per-vertex (M-value) properties.
    """

    minzoom: int
    maxzoom: int
    draw_types: list[DrawType]
    shape: Shape
    description: str | None = None
    m_shape: Shape | None = None

    def to_dict(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "minzoom": self.minzoom,
            "maxzoom": self.maxzoom,
            "drawTypes": [_plain(draw_type) for draw_type in self.draw_types],
            "shape": copy.deepcopy(self.shape),
        }
        if self.description is not None:
            document["description"] = self.description
        if self.m_shape is not None:
            document["mShape"] = copy.deepcopy(self.m_shape)
        return document

    @classmethod
    def from_dict(cls, value: Any) -> LayerMetadata | None:
        if not isinstance(value, Mapping):
            return None
        draw_types = value.get("drawTypes")
        shape = value.get("shape")
        m_shape = value.get("mShape")
        description = value.get("description")
        return cls(
            minzoom=_number_or(value.get("minzoom"), 0),
            maxzoom=_number_or(value.get("maxzoom"), 0),
            draw_types=[DrawType.from_value(code) for code in draw_types]
            if isinstance(draw_types, list)
            else [],
            shape=copy.deepcopy(dict(shape)) if isinstance(shape, Mapping) else {},
            description=description if isinstance(description, str) else None,
            m_shape=copy.deepcopy(dict(m_shape))
            if isinstance(m_shape, Mapping)
            else None,
        )


@dataclasses.dataclass
class VectorLayer:
    """Simplified layer record kept for older TileJSON consumers.

    Records loaded from a document serialize back to exactly what was
    read: keys without a typed field, and values a typed field rejects,
    are held in ``extra``.
    """

    id: str | None
    fields: dict[str, str] | None = dataclasses.field(default_factory=dict)
    description: str | None = None
    minzoom: int | None = None
    maxzoom: int | None = None
    extra: dict[str, Any] = dataclasses.field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        document = copy.deepcopy(self.extra)
        if self.id is not None:
            document["id"] = self.id
        if self.description is not None:
            document["description"] = self.description
        if self.minzoom is not None:
            document["minzoom"] = self.minzoom
        if self.maxzoom is not None:
            document["maxzoom"] = self.maxzoom
        if self.fields is not None:
            document["fields"] = dict(self.fields)
        return document

    @classmethod
    def from_dict(cls, value: Any) -> VectorLayer | None:
        if not isinstance(value, Mapping):
            return None
        raw_id = value.get("id")
        fields = value.get("fields")
        description = value.get("description")
        minzoom = value.get("minzoom")
        maxzoom = value.get("maxzoom")
        layer = cls(
            id=raw_id if isinstance(raw_id, str) else None,
            fields=copy.deepcopy(dict(fields)) if isinstance(fields, Mapping) else None,
            description=description if isinstance(description, str) else None,
            minzoom=minzoom if _is_number(minzoom) else None,
            maxzoom=maxzoom if _is_number(maxzoom) else None,
        )
        for key, item in value.items():
            if key not in _VECTOR_LAYER_KEYS or getattr(layer, key) is None:
                layer.extra[key] = copy.deepcopy(item)
        return layer


_VECTOR_LAYER_KEYS: frozenset[str] = frozenset(
    {"id", "fields", "description", "minzoom", "maxzoom"}
)


# Document keys owned by Metadata; anything else is carried in ``extra``.
CANONICAL_KEYS: frozenset[str] = frozenset(
    {
        "s2tilejson",
        "version",
        "name",
        "scheme",
        "description",
        "type",
        "extension",
        "encoding",
        "faces",
        "bounds",
        "wmbounds",
        "s2bounds",
        "minzoom",
        "maxzoom",
        "centerpoint",
        "attributions",
        "layers",
        "tilestats",
        "vector_layers",
    }
)


@dataclasses.dataclass
class Metadata:
    """Canonical s2tilejson document describing a tile set.

    Attributes:
        s2tilejson: Version of the s2tilejson format; marks the document
            as canonical.
        version: Version of the data.
        name: Name of the data.
        scheme: Tile addressing scheme.
        description: Description of the data.
        source_type: Kind of data (serialized as ``type``).
        extension: Extension used when requesting a tile.
        encoding: Compression of each tile.
        faces: Faces that hold data, ascending.
        bounds: Lon-lat bounding box of the data.
        wmbounds: Web-Mercator tile-index bounds per zoom.
        s2bounds: S2 tile-index bounds per face and zoom.
        minzoom: Lowest zoom at which to request tiles.
        maxzoom: Highest zoom at which to request tiles.
        centerpoint: Display center of the data.
        attributions: Display name to link.
        layers: Layer blueprints keyed by layer name.
        tilestats: Tile counters, or None when unknown.
        vector_layers: Legacy layer records.
        extra: Keys with no canonical meaning, kept verbatim.
        received: The trusted document this instance was loaded from, if
            any. When set, ``to_dict`` returns it unchanged.
    """

    s2tilejson: str = "1.0.0"
    version: str = "1.0.0"
    name: str = "default"
    scheme: str = Scheme.FZXY
    description: str = "Built with s2maps-cli"
    source_type: str = SourceType.VECTOR
    extension: str = "pbf"
    encoding: str = Encoding.NONE
    faces: list[int] = dataclasses.field(default_factory=list)
    bounds: bbox_utils.BBox = dataclasses.field(
        default_factory=bbox_utils.BBox.empty
    )
    wmbounds: ZoomBounds = dataclasses.field(default_factory=dict)
    s2bounds: dict[int, ZoomBounds] = dataclasses.field(
        default_factory=empty_face_bounds
    )
    minzoom: Number = 0
    maxzoom: Number = 27
    centerpoint: Center = dataclasses.field(default_factory=Center)
    attributions: dict[str, str] = dataclasses.field(default_factory=dict)
    layers: dict[str, LayerMetadata] = dataclasses.field(default_factory=dict)
    tilestats: TileStats | None = dataclasses.field(default_factory=TileStats)
    vector_layers: list[VectorLayer] = dataclasses.field(default_factory=list)
    extra: dict[str, Any] = dataclasses.field(default_factory=dict)
    received: dict[str, Any] | None = dataclasses.field(
        default=None, repr=False, compare=False
    )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict.

        Zoom and face keys are stringified. Sentinel infinities and NaN
        are kept as floats; serializing them to strict JSON is up to the
        caller. ``tilestats`` is left out when the counts are unknown.

        Returns:
            A copy of ``received`` when set, otherwise the document built
            from the fields, including every key from ``extra``.
        """
        if self.received is not None:
            return copy.deepcopy(self.received)
        document = copy.deepcopy(self.extra)
        document.update(
            {
                "s2tilejson": self.s2tilejson,
                "version": self.version,
                "name": self.name,
                "scheme": _plain(self.scheme),
                "description": self.description,
                "type": _plain(self.source_type),
                "extension": self.extension,
                "encoding": _plain(self.encoding),
                "faces": [_plain(face) for face in self.faces],
                "bounds": self.bounds.to_list(),
                "wmbounds": _zoom_bounds_to(self.wmbounds),
                "s2bounds": {
                    str(face): _zoom_bounds_to(zooms)
                    for face, zooms in sorted(self.s2bounds.items())
                },
                "minzoom": self.minzoom,
                "maxzoom": self.maxzoom,
                "centerpoint": self.centerpoint.to_dict(),
                "attributions": dict(self.attributions),
                "layers": {
                    name: layer.to_dict() for name, layer in self.layers.items()
                },
                "vector_layers": [layer.to_dict() for layer in self.vector_layers],
            }
        )
        if self.tilestats is not None:
            document["tilestats"] = self.tilestats.to_dict()
        return document

    @classmethod
    def from_dict(cls, document: Any) -> Metadata:
        """Rehydrate a canonical document without validating it.

        Missing keys take their defaults and malformed values fall back to
        defaults; nothing is raised. Unknown keys land in ``extra``. A
        missing ``tilestats`` stays None, since the counts are unknown.

        Args:
            document: Parsed JSON object, normally carrying ``s2tilejson``.

        Returns:
            The document as a Metadata instance.
        """
        if not isinstance(document, Mapping):
            document = {}
        defaults = cls()

        s2bounds = empty_face_bounds()
        raw_s2bounds = document.get("s2bounds")
        if isinstance(raw_s2bounds, Mapping):
            for key, zooms in raw_s2bounds.items():
                try:
                    face = int(key)
                except (TypeError, ValueError, OverflowError):
                    continue
                s2bounds[face] = _zoom_bounds_from(zooms)

        raw_faces = document.get("faces")
        raw_attributions = document.get("attributions")
        raw_layers = document.get("layers")
        raw_vector_layers = document.get("vector_layers")

        layers: dict[str, LayerMetadata] = {}
        if isinstance(raw_layers, Mapping):
            for name, raw_layer in raw_layers.items():
                layer = LayerMetadata.from_dict(raw_layer)
                if layer is not None:
                    layers[str(name)] = layer

        vector_layers: list[VectorLayer] = []
        if isinstance(raw_vector_layers, list):
            for raw_layer in raw_vector_layers:
                vector_layer = VectorLayer.from_dict(raw_layer)
                if vector_layer is not None:
                    vector_layers.append(vector_layer)

        return cls(
            s2tilejson=_str_or(document.get("s2tilejson"), defaults.s2tilejson),
            version=_str_or(document.get("version"), defaults.version),
            name=_str_or(document.get("name"), defaults.name),
            scheme=_str_or(document.get("scheme"), defaults.scheme),
            description=_str_or(document.get("description"), defaults.description),
            source_type=_str_or(document.get("type"), defaults.source_type),
            extension=_str_or(document.get("extension"), defaults.extension),
            encoding=_str_or(document.get("encoding"), defaults.encoding),
            faces=[face for face in raw_faces if _is_number(face)]
            if isinstance(raw_faces, list)
            else [],
            bounds=bbox_utils.BBox.from_sequence(document.get("bounds"))
            or defaults.bounds,
            wmbounds=_zoom_bounds_from(document.get("wmbounds")),
            s2bounds=s2bounds,
            minzoom=_number_or(document.get("minzoom"), defaults.minzoom),
            maxzoom=_number_or(document.get("maxzoom"), defaults.maxzoom),
            centerpoint=Center.from_dict(document.get("centerpoint")),
            attributions={
                str(name): href
                for name, href in raw_attributions.items()
                if isinstance(href, str)
            }
            if isinstance(raw_attributions, Mapping)
            else {},
            layers=layers,
            tilestats=TileStats.from_dict(document.get("tilestats")),
            vector_layers=vector_layers,
            extra={
                key: copy.deepcopy(value)
                for key, value in document.items()
                if key not in CANONICAL_KEYS
            },
        )
