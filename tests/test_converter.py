"""Unit tests for legacy TileJSON conversion.

This module feeds legacy documents to to_metadata and checks the
canonical result: defaults for missing fields, extension and center
derivation, attribution extraction, pass-through of unknown keys, and
identity for documents that are already canonical. No input may make
the converter raise.

See Also:
    - s2tilejson/services/converter.py for the implementation.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import pytest

from s2tilejson.core import config
from s2tilejson.models import DrawType, LayerMetadata, Metadata
from s2tilejson.services import builder as builder_service
from s2tilejson.services import converter

EMPTY_FACES = {"0": {}, "1": {}, "2": {}, "3": {}, "4": {}, "5": {}}

MAPBOX_VECTOR_LAYERS: list[dict[str, Any]] = [
    {
        "id": "telephone",
        "fields": {
            "phone_number": "the phone number",
            "payment": "how to pay",
        },
    },
    {
        "id": "bicycle_parking",
        "fields": {
            "type": "the type of bike parking",
            "year_installed": "the year the bike parking was installed",
        },
    },
    {
        "id": "showers",
        "fields": {
            "water_temperature": "the maximum water temperature",
            "wear_sandles": "whether you should wear sandles or not",
            "wheelchair": "is the shower wheelchair friendly?",
        },
    },
]

MAPBOX_TILES = [
    "https://a.tile.custom-osm-tiles.org/{z}/{x}/{y}.mvt",
    "https://b.tile.custom-osm-tiles.org/{z}/{x}/{y}.mvt",
    "https://c.tile.custom-osm-tiles.org/{z}/{x}/{y}.mvt",
]


def _convert(document: Any) -> Metadata:
    return converter.to_metadata(document, settings=config.Settings())


def test_mapbox_metadata() -> None:
    """Test conversion of a complete Mapbox TileJSON 3.0.0 document."""
    mapbox = {
        "tilejson": "3.0.0",
        "name": "OpenStreetMap",
        "description": "A free editable map of the whole world.",
        "version": "1.0.0",
        "attribution": "<a href='https://openstreetmap.org'>OSM contributors</a>",
        "scheme": "xyz",
        "tiles": MAPBOX_TILES,
        "minzoom": 0,
        "maxzoom": 18,
        "bounds": [-180, -85, 180, 85],
        "fillzoom": 6,
        "something_custom": "this is my unique field",
        "vector_layers": MAPBOX_VECTOR_LAYERS,
    }

    assert _convert(mapbox).to_dict() == {
        "s2tilejson": "1.0.0",
        "version": "1.0.0",
        "name": "OpenStreetMap",
        "scheme": "xyz",
        "description": "A free editable map of the whole world.",
        "type": "vector",
        "extension": "tile",
        "encoding": "none",
        "faces": [0],
        "bounds": [-180, -85, 180, 85],
        "wmbounds": {},
        "s2bounds": EMPTY_FACES,
        "minzoom": 0,
        "maxzoom": 18,
        "centerpoint": {"lon": 0, "lat": 0, "zoom": 0},
        "attributions": {"OSM contributors": "https://openstreetmap.org"},
        "layers": {},
        "vector_layers": MAPBOX_VECTOR_LAYERS,
        # legacy keys carried through
        "tilejson": "3.0.0",
        "attribution": "<a href='https://openstreetmap.org'>OSM contributors</a>",
        "tiles": MAPBOX_TILES,
        "fillzoom": 6,
        "something_custom": "this is my unique field",
    }


def test_minimal_metadata() -> None:
    """Test a minimal raster document; type and extension are reset."""
    mini = {
        "bounds": [-180, -85, 180, 85],
        "name": "Mapbox Satellite",
        "scheme": "xyz",
        "format": "zxy",
        "type": "raster",
        "extension": "webp",
        "encoding": "none",
        "minzoom": 0,
        "maxzoom": 3,
    }

    assert _convert(mini).to_dict() == {
        "s2tilejson": "1.0.0",
        "version": "1.0.0",
        "name": "Mapbox Satellite",
        "scheme": "xyz",
        "description": "",
        "type": "vector",
        "extension": "pbf",
        "encoding": "none",
        "faces": [0],
        "bounds": [-180, -85, 180, 85],
        "wmbounds": {},
        "s2bounds": EMPTY_FACES,
        "minzoom": 0,
        "maxzoom": 3,
        "centerpoint": {"lon": 0, "lat": 0, "zoom": 0},
        "attributions": {},
        "layers": {},
        "vector_layers": [],
        "format": "zxy",
    }


def test_conversion_defaults() -> None:
    """Test defaults when only name, zooms and bounds are supplied."""
    metadata = _convert(
        {
            "name": "Basemap",
            "minzoom": 0,
            "maxzoom": 18,
            "bounds": [-180, -85, 180, 85],
        }
    )
    assert metadata.name == "Basemap"
    assert metadata.description == ""
    assert metadata.version == "1.0.0"
    assert metadata.attributions == {}
    assert metadata.layers == {}
    assert metadata.bounds.to_list() == [-180, -85, 180, 85]
    assert metadata.minzoom == 0
    assert metadata.maxzoom == 18


def test_empty_legacy_document() -> None:
    """Test the placeholders used for a document with no fields at all."""
    metadata = _convert({})
    assert metadata.name == "default"
    assert metadata.scheme == "xyz"
    assert metadata.minzoom == 0
    assert metadata.maxzoom == 27
    assert metadata.extension == "pbf"
    assert metadata.bounds.is_empty()
    assert metadata.centerpoint.to_dict() == {"lon": 0, "lat": 0, "zoom": 0}
    assert metadata.extra == {}


def test_malformed_fields_fall_back() -> None:
    """Test that wrongly typed fields are replaced by defaults."""
    metadata = _convert(
        {
            "name": ["not", "a", "name"],
            "minzoom": "3",
            "maxzoom": True,
            "bounds": [0, 0, 1],
            "tiles": "https://example.org/{z}/{x}/{y}.png",
            "vector_layers": {"id": "x"},
            "center": [1, 2],
        }
    )
    assert metadata.name == "default"
    assert metadata.minzoom == 0
    assert metadata.maxzoom == 27
    assert metadata.bounds.is_empty()
    assert metadata.extension == "pbf"
    assert metadata.vector_layers == []
    assert metadata.centerpoint.to_dict() == {"lon": 0, "lat": 0, "zoom": 0}


def test_center_from_legacy_triple() -> None:
    """Test that a [lon, lat, zoom] center becomes the centerpoint."""
    metadata = _convert({"center": [-76.27, 39.15, 8]})
    assert metadata.centerpoint.to_dict() == {"lon": -76.27, "lat": 39.15, "zoom": 8}
    assert metadata.extra["center"] == [-76.27, 39.15, 8]


@pytest.mark.parametrize(
    ("tiles", "expected"),
    [
        (["https://tiles.example.org/{z}/{x}/{y}.pbf"], "example"),
        (["tiles/{z}/{x}/{y}.png"], "png"),
        (["no-dot-here/{z}/{x}/{y}"], "pbf"),
        ([], "pbf"),
        ([42], "pbf"),
    ],
)
def test_extension_from_first_tile_template(tiles: list[Any], expected: str) -> None:
    """Test the segment-after-first-dot rule and its default."""
    assert _convert({"tiles": tiles}).extension == expected


@pytest.mark.parametrize(
    ("markup", "expected"),
    [
        (
            "<a href='https://x.org'>X contributors</a>",
            {"X contributors": "https://x.org"},
        ),
        (
            '<a href="https://openstreetmap.org/copyright">© OpenStreetMap</a>',
            {"© OpenStreetMap": "https://openstreetmap.org/copyright"},
        ),
        ("© X contributors", {}),
        ("<a>missing link</a>", {}),
        ("<a href='https://x.org'>unterminated", {}),
        (None, {}),
        (12, {}),
    ],
)
def test_extract_attribution(markup: Any, expected: dict[str, str]) -> None:
    """Test anchor-tag extraction and its silent failure modes."""
    assert converter.extract_attribution(markup) == expected


def test_unmatched_attribution_is_omitted() -> None:
    """Test that plain-text attribution yields no attributions."""
    metadata = _convert({"attribution": "Data © somebody"})
    assert metadata.attributions == {}
    assert metadata.extra["attribution"] == "Data © somebody"


def test_vector_layers_copied_verbatim() -> None:
    """Test that legacy vector layers keep their exact records."""
    metadata = _convert({"vector_layers": MAPBOX_VECTOR_LAYERS})
    assert [layer.to_dict() for layer in metadata.vector_layers] == (
        MAPBOX_VECTOR_LAYERS
    )


def test_vector_layers_keep_unknown_and_rejected_values() -> None:
    """Test that extra keys, nulls and a missing id survive conversion."""
    raw_layers = [
        {"id": "roads", "fields": {}, "source": "osm", "minzoom": None},
        {"fields": {"name": "the road name"}, "description": None},
        {"id": "water"},
    ]
    metadata = _convert({"vector_layers": raw_layers})
    assert [layer.to_dict() for layer in metadata.vector_layers] == raw_layers
    assert metadata.to_dict()["vector_layers"] == raw_layers


def test_non_mapping_vector_layer_entries_are_dropped() -> None:
    """Test that only object entries become vector-layer records."""
    metadata = _convert({"vector_layers": ["roads", 3, {"id": "water"}]})
    assert [layer.to_dict() for layer in metadata.vector_layers] == [
        {"id": "water"}
    ]


def test_converted_document_has_no_tilestats() -> None:
    """Test that unknown tile counts are left out of the document."""
    metadata = _convert({"name": "Legacy"})
    assert metadata.tilestats is None
    assert "tilestats" not in metadata.to_dict()


def test_input_document_is_not_mutated() -> None:
    """Test that conversion copies instead of sharing legacy values."""
    legacy = {"tiles": ["a.b/{z}"], "custom": {"nested": [1, 2]}}
    metadata = _convert(legacy)
    metadata.extra["custom"]["nested"].append(3)
    assert legacy["custom"] == {"nested": [1, 2]}


def test_metadata_instance_passes_through() -> None:
    """Test that an existing Metadata instance is returned as-is."""
    metadata = Metadata(name="already canonical")
    assert converter.to_metadata(metadata) is metadata


def test_canonical_document_passes_through() -> None:
    """Test that a document with the s2tilejson marker is kept as-is."""
    builder = builder_service.MetadataBuilder(settings=config.Settings())
    builder.set_name("OSM")
    builder.add_attribution("OSM", "https://openstreetmap.org")
    builder.add_layer(
        "roads",
        LayerMetadata(
            minzoom=0,
            maxzoom=12,
            draw_types=[DrawType.LINES],
            shape={"name": "string", "lanes": ["u64"]},
        ),
    )
    builder.add_tile_s2(2, 3, 1, 4, (-10, -5, 10, 5))
    builder.add_tile_wm(1, 0, 1, (-20, -5, 0, 0))
    canonical = builder.commit().to_dict()
    canonical["custom"] = {"keep": True}

    assert _convert(canonical).to_dict() == canonical


def test_converted_document_passes_through_again() -> None:
    """Test that converting a converted document changes nothing."""
    first = _convert({"name": "Legacy", "tiles": MAPBOX_TILES}).to_dict()
    assert _convert(first).to_dict() == first


@pytest.mark.parametrize("document", [None, "tilejson", 3, ["name"]])
def test_non_mapping_input_does_not_raise(
    document: Any, caplog: pytest.LogCaptureFixture
) -> None:
    """Test that a non-mapping input converts as an empty document."""
    with caplog.at_level(logging.WARNING, logger="s2tilejson.services.converter"):
        metadata = _convert(document)
    assert metadata.name == "default"
    assert metadata.faces == [0]
    assert "Expected a mapping" in caplog.text


@pytest.mark.parametrize(
    "document",
    [
        {"s2tilejson": "1.0.0", "name": "x"},
        {"s2tilejson": "1.0.0", "faces": [0, "one", None], "layers": "none"},
        {
            "s2tilejson": "1.0.0",
            "vector_layers": [{"id": "a", "fields": {}, "source": "s1"}, 7],
            "custom": [1, 2],
        },
        {"s2tilejson": 2, "bounds": None, "tilestats": "unknown"},
    ],
)
def test_partial_canonical_document_is_unchanged(document: dict[str, Any]) -> None:
    """Test that a marked document is emitted exactly as received."""
    metadata = _convert(document)
    assert metadata.to_dict() == document


def test_canonical_document_is_copied() -> None:
    """Test that the kept document is isolated from the caller's."""
    document = {"s2tilejson": "1.0.0", "custom": {"nested": [1]}}
    metadata = _convert(document)
    document["custom"]["nested"].append(2)
    assert metadata.to_dict() == {"s2tilejson": "1.0.0", "custom": {"nested": [1]}}


@pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
def test_non_finite_tile_counts_do_not_raise(value: float) -> None:
    """Test that infinite or NaN counters in a marked document are tolerated."""
    document = {
        "s2tilejson": "1.0.0",
        "tilestats": {"total": value, "0": value, "1": 4},
    }
    metadata = _convert(document)
    assert metadata.tilestats is not None
    assert metadata.tilestats.total == 0
    assert metadata.tilestats.get(0) == 0
    assert metadata.tilestats.get(1) == 4
