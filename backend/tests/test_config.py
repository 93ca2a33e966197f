import json
from pathlib import Path

import pytest
from tablebook.config import get_settings, get_slot_catalog
from tablebook.domain.errors import UnknownResourceError


@pytest.fixture(autouse=True)
def _clear_caches():
    get_settings.cache_clear()
    get_slot_catalog.cache_clear()
    yield
    get_settings.cache_clear()
    get_slot_catalog.cache_clear()


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_CAPACITY", "5")
    monkeypatch.setenv("BOOKING_MAX_ATTEMPTS", "4")
    monkeypatch.setenv("BOOKING_RETRY_BACKOFF", "0.2")
    monkeypatch.setenv("TIMEZONE", "UTC")
    settings = get_settings()
    assert settings.default_capacity == 5
    assert settings.booking_max_attempts == 4
    assert settings.booking_retry_backoff == pytest.approx(0.2)
    assert settings.timezone == "UTC"
    assert settings.max_party_size == 8


def test_catalog_empty_without_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SLOT_CATALOG_PATH", raising=False)
    catalog = get_slot_catalog()
    assert catalog.resources() == []
    with pytest.raises(UnknownResourceError):
        catalog.slots_for("R1")


def test_catalog_loaded_from_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"resources": {"R1": {"slots": ["18:00", "18:30"]}}}), encoding="utf-8")
    monkeypatch.setenv("SLOT_CATALOG_PATH", str(path))
    monkeypatch.setenv("DEFAULT_CAPACITY", "2")
    catalog = get_slot_catalog()
    assert catalog.slots_for("R1") == ("18:00", "18:30")
    assert catalog.capacity_for("R1") == 2
