import os
from datetime import date, timedelta
from typing import Callable

import pytest

# Importing tablebook.database builds an engine from DATABASE_URL.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTH_SECRET", "testsecret")

from tablebook.domain.catalog import SlotCatalog  # noqa: E402
from tablebook.infrastructure.memory import InMemoryReservationStore  # noqa: E402
from tablebook.usecases.bookings import BookingService  # noqa: E402

TODAY = date(2026, 10, 18)


def fixed_today() -> date:
    return TODAY


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def catalog() -> SlotCatalog:
    catalog = SlotCatalog(default_capacity=3)
    catalog.register("R1", slots=["18:00", "18:30"])
    catalog.register("R2", slots=["12:00"], capacity=1)
    return catalog


@pytest.fixture()
def make_service(catalog: SlotCatalog) -> Callable[..., BookingService]:
    def _make(store: object | None = None, **kwargs: object) -> BookingService:
        options: dict = {"today": fixed_today, "max_party_size": 8}
        options.update(kwargs)
        return BookingService(store or InMemoryReservationStore(), catalog, **options)  # type: ignore[arg-type]

    return _make


@pytest.fixture()
def tomorrow() -> date:
    return TODAY + timedelta(days=1)
