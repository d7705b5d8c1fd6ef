import json

import pytest
from pyproj import Geod
from shapely.geometry import LineString
from sqlalchemy import MetaData, create_engine

from overture_pgr.sources import overture_table
from overture_pgr_types import Segment


def make_segment(
    segment_id="seg-1",
    coords=((0.0, 0.0), (1.0, 0.0), (2.0, 0.0)),
    connectors=(("A", 0.0), ("B", 0.5), ("C", 1.0)),
    road_class="residential",
    speed=None,
    unit=None,
    restrictions=None,
    **extra,
):
    return Segment(
        id=segment_id,
        geometry=LineString(coords),
        road_class=road_class,
        speed_value=speed,
        speed_unit=unit,
        access_restrictions=restrictions or [],
        connectors=[{"connector_id": c, "at": at} for c, at in connectors],
        **extra,
    )


def overture_row(
    segment_id,
    coords,
    connectors,
    road_class="residential",
    speed_limits=None,
    access_restrictions=None,
    name=None,
):
    """A raw row of the overture table: nested columns as JSON text, geometry as WKT."""
    return {
        "id": segment_id,
        "wkb_geometry": LineString(coords).wkt,
        "class": road_class,
        "subclass": None,
        "names": json.dumps({"primary": name}) if name else None,
        "road_surface": json.dumps([{"value": "paved"}]),
        "speed_limits": json.dumps(speed_limits) if speed_limits is not None else None,
        "access_restrictions": (
            json.dumps(access_restrictions) if access_restrictions is not None else None
        ),
        "connectors": json.dumps(
            [{"connector_id": c, "at": at} for c, at in connectors]
        ),
    }


@pytest.fixture
def km_line():
    """A straight line along the equator, 1000 m long on the WGS84 ellipsoid."""
    lon, _, _ = Geod(ellps="WGS84").fwd(0.0, 0.0, 90.0, 1000.0)
    return LineString([(0.0, 0.0), (lon, 0.0)])


@pytest.fixture
def engine(tmp_path):
    return create_engine(f"sqlite:///{tmp_path / 'graph.db'}")


@pytest.fixture
def load_rows(engine):
    """Create the overture table and insert raw rows into it."""
    metadata = MetaData()
    table = overture_table(metadata)
    metadata.create_all(engine)

    def _load(rows):
        with engine.begin() as connection:
            connection.execute(table.insert(), rows)

    return _load
