import pytest
from pydantic import ValidationError

from overture_pgr.config import ROUTABLE_CLASSES, TopologySettings


def test_defaults():
    settings = TopologySettings()
    assert settings.routable_classes == ROUTABLE_CLASSES
    assert "service" not in settings.routable_classes
    assert settings.one_way_reverse_cost == -1
    assert settings.database_url is None


def test_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///graph.db")
    monkeypatch.setenv("PGR_ROUTABLE_CLASSES", "primary, secondary ,")
    monkeypatch.setenv("PGR_MAX_WORKERS", "4")
    monkeypatch.delenv("PGR_SOURCE_TABLE", raising=False)

    settings = TopologySettings.from_env()
    assert settings.database_url == "sqlite:///graph.db"
    assert settings.routable_classes == {"primary", "secondary"}
    assert settings.max_workers == 4
    assert settings.source_table == "overture"


def test_sentinel_must_be_negative():
    with pytest.raises(ValidationError):
        TopologySettings(one_way_reverse_cost=0)
