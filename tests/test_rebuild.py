import json

import pytest
from shapely import wkt
from shapely.geometry import mapping
from sqlalchemy import inspect

from overture_pgr.config import TopologySettings
from overture_pgr.errors import SpeedConversionError
from overture_pgr.rebuild import rebuild_topology, rebuild_topology_from_geojson
from overture_pgr.storage import TopologyStore

from conftest import overture_row

BACKWARD_DENIED = {"access_type": "denied", "when": {"heading": "backward"}}


def network_rows():
    return [
        overture_row("s1", [(0, 0), (0.005, 0), (0.01, 0)], [("A", 0.0), ("B", 0.5), ("C", 1.0)], name="First Avenue"),
        overture_row(
            "s2",
            [(0.01, 0), (0.02, 0)],
            [("C", 0.0), ("D", 1.0)],
            road_class="motorway",
            speed_limits=[{"max_speed": {"value": 60, "unit": "mph"}}],
            access_restrictions=[BACKWARD_DENIED],
        ),
        overture_row("s3", [(0.01, 0), (0.01, 0.01)], [("C", 0.0), ("E", 1.0)], road_class="footway"),
    ]


def test_rebuild_writes_both_tables(engine, load_rows):
    load_rows(network_rows())
    report = rebuild_topology(engine)

    assert report.segments_read == 3
    assert report.segments_rejected == 0
    assert report.vertex_count == 4
    assert report.edge_count == 3

    store = TopologyStore()
    with engine.connect() as connection:
        assert store.counts(connection) == {"vertex_count": 4, "edge_count": 3}
        connectors = store.load_connectors(connection)
        edges = store.load_edges(connection)

    assert [c.connector_id for c in connectors] == ["A", "B", "C", "D"]
    by_id = {(e.id, e.connector_source): e for e in edges}
    motorway = by_id[("s2", "C")]
    assert motorway.road_class == "motorway"
    assert motorway.speed_kmph == pytest.approx(60 * 1.60934)
    assert motorway.one_way is True
    assert motorway.reverse_cost == -1
    assert by_id[("s1", "A")].primary_name == "First Avenue"
    assert by_id[("s1", "A")].surface == "paved"
    assert list(by_id[("s1", "A")].geometry.coords) == [(0.0, 0.0), (0.005, 0.0)]


def test_rebuild_is_idempotent(engine, load_rows):
    load_rows(network_rows())
    first = rebuild_topology(engine)
    second = rebuild_topology(engine)

    assert first.stats == second.stats
    with engine.connect() as connection:
        assert TopologyStore().counts(connection) == {"vertex_count": 4, "edge_count": 3}


def test_invalid_rows_are_rejected(engine, load_rows):
    rows = network_rows()
    broken = overture_row("bad", [(0, 0), (1, 0)], [("A", 0.0)])
    load_rows(rows + [broken])

    report = rebuild_topology(engine)
    assert report.segments_read == 3
    assert report.segments_rejected == 1


def test_failed_rebuild_keeps_previous_tables(engine, load_rows):
    load_rows(network_rows())
    rebuild_topology(engine)

    load_rows([
        overture_row(
            "s4",
            [(0, 1), (0, 2)],
            [("X", 0.0), ("Y", 1.0)],
            speed_limits=[{"max_speed": {"value": "fast", "unit": "kmph"}}],
        )
    ])
    with pytest.raises(SpeedConversionError):
        rebuild_topology(engine)

    with engine.connect() as connection:
        assert TopologyStore().counts(connection) == {"vertex_count": 4, "edge_count": 3}


def test_counts_without_tables(engine):
    with engine.connect() as connection:
        assert TopologyStore().counts(connection) == {"vertex_count": 0, "edge_count": 0}


def test_custom_table_names(engine, load_rows):
    load_rows(network_rows())
    settings = TopologySettings(connectors_table="vertices", edges_table="ways")
    rebuild_topology(engine, settings)

    tables = set(inspect(engine).get_table_names())
    assert {"vertices", "ways"} <= tables
    assert "pgr_edges" not in tables


def test_rebuild_from_geojson(engine, tmp_path):
    features = []
    for row in network_rows():
        properties = {k: v for k, v in row.items() if k not in ("id", "wkb_geometry")}
        for key in ("names", "road_surface", "speed_limits", "access_restrictions", "connectors"):
            if properties[key] is not None:
                properties[key] = json.loads(properties[key])
        features.append(
            {
                "type": "Feature",
                "id": row["id"],
                "geometry": mapping(wkt.loads(row["wkb_geometry"])),
                "properties": properties,
            }
        )
    path = tmp_path / "segments.geojson"
    path.write_text(json.dumps({"type": "FeatureCollection", "features": features}))

    report = rebuild_topology_from_geojson(engine, path)
    assert report.segments_read == 3
    assert report.edge_count == 3
