import pytest
from fastapi.testclient import TestClient

from overture_pgr.api import create_app
from overture_pgr.api.deps import get_engine, get_settings
from overture_pgr.config import TopologySettings

from conftest import overture_row


@pytest.fixture
def client(engine):
    app = create_app()
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_settings] = lambda: TopologySettings()
    return TestClient(app)


def test_stats_before_rebuild(client):
    response = client.get("/topology/stats")
    assert response.status_code == 200
    assert response.json() == {"vertex_count": 0, "edge_count": 0, "has_network": False}


def test_rebuild_then_stats(client, load_rows):
    load_rows([
        overture_row("s1", [(0, 0), (0.01, 0)], [("A", 0.0), ("B", 0.5), ("C", 1.0)]),
        overture_row("s2", [(0.01, 0), (0.01, 0.01)], [("C", 0.0), ("D", 1.0)], road_class="service"),
    ])

    response = client.post("/topology/rebuild")
    assert response.status_code == 200
    report = response.json()
    assert report["segments_read"] == 2
    assert report["stats"]["connectors"] == 3
    assert report["stats"]["graph_edges"] == 2

    response = client.get("/topology/stats")
    assert response.json() == {"vertex_count": 3, "edge_count": 2, "has_network": True}


def test_rebuild_with_bad_speed(client, load_rows):
    load_rows([
        overture_row(
            "s1",
            [(0, 0), (0.01, 0)],
            [("A", 0.0), ("B", 1.0)],
            speed_limits=[{"max_speed": {"value": "fast", "unit": "kmph"}}],
        )
    ])

    response = client.post("/topology/rebuild")
    assert response.status_code == 500
    assert "fast" in response.json()["detail"]


def test_rebuild_without_source_table(client):
    response = client.post("/topology/rebuild")
    assert response.status_code == 500
