"""
Segment sources.

Read already-materialized Overture segment records and validate them
into Segment models. Two sources are supported:

- a GeoJSON FeatureCollection whose feature properties are segment attributes
- an "overture" SQL table, nested columns stored as JSON text and the
  geometry as WKB (hex) or WKT
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Tuple, Union

from pydantic import ValidationError
from sqlalchemy import Column, Connection, MetaData, String, Table, Text, select

from overture_pgr_types import Segment

logger = logging.getLogger(__name__)


def overture_table(metadata: MetaData, name: str = "overture") -> Table:
    """Layout of the raw segment table, as loaded by the import tooling."""
    return Table(
        name,
        metadata,
        Column("id", String, primary_key=True),
        Column("wkb_geometry", Text, nullable=False),
        Column("class", String),
        Column("subclass", String),
        Column("names", Text),
        Column("road_surface", Text),
        Column("speed_limits", Text),
        Column("access_restrictions", Text),
        Column("connectors", Text),
    )


def parse_segments(records: Iterable[Dict[str, Any]]) -> Tuple[List[Segment], int]:
    """
    Validate raw records into segments.

    Records that do not validate (missing geometry, fewer than two
    connectors, decreasing offsets...) are logged and skipped.

    Returns:
        The valid segments and the number of rejected records
    """
    segments: List[Segment] = []
    rejected = 0
    for record in records:
        try:
            segments.append(Segment.model_validate(record))
        except ValidationError as e:
            rejected += 1
            logger.debug(f"Segment {record.get('id', 'unknown')} rejected: {e}")

    if rejected:
        logger.warning(f"{rejected} segment records rejected during validation")
    return segments, rejected


def _iter_features(path: Path) -> Iterator[Dict[str, Any]]:
    with open(path, encoding="utf-8") as f:
        collection = json.load(f)
    for feature in collection.get("features", []):
        record = dict(feature.get("properties") or {})
        record.setdefault("id", feature.get("id"))
        record["geometry"] = feature.get("geometry")
        yield record


def load_segments_from_geojson(path: Union[str, Path]) -> Tuple[List[Segment], int]:
    """Load segments from a GeoJSON FeatureCollection file."""
    path = Path(path)
    logger.info(f"Reading segments from {path}")
    return parse_segments(_iter_features(path))


def load_segments_from_table(
    connection: Connection, table_name: str = "overture"
) -> Tuple[List[Segment], int]:
    """Load segments from the raw segment table."""
    table = overture_table(MetaData(), table_name)
    logger.info(f"Reading segments from table {table_name}")
    rows = connection.execute(select(table))
    return parse_segments(dict(row._mapping) for row in rows)
