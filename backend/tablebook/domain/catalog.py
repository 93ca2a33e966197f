from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping

from .errors import UnknownResourceError

DEFAULT_CAPACITY = 3

DEFAULT_TIME_SLOTS: tuple[str, ...] = (
    "11:00",
    "11:30",
    "12:00",
    "12:30",
    "13:00",
    "13:30",
    "17:30",
    "18:00",
    "18:30",
    "19:00",
    "19:30",
    "20:00",
    "20:30",
    "21:00",
)


@dataclass(frozen=True)
class CatalogEntry:
    slots: tuple[str, ...]
    capacity: int


def _normalize_slots(slots: Iterable[str]) -> tuple[str, ...]:
    labels = tuple(slots)
    if not labels:
        raise ValueError("slot list must not be empty")
    parsed = []
    for label in labels:
        if not isinstance(label, str):
            raise ValueError(f"slot label must be a string: {label!r}")
        try:
            value = datetime.strptime(label, "%H:%M").time()
        except ValueError as exc:
            raise ValueError(f"slot label must be HH:MM: {label!r}") from exc
        # Rejects non-canonical spellings such as "9:00".
        if value.strftime("%H:%M") != label:
            raise ValueError(f"slot label must be HH:MM: {label!r}")
        parsed.append(value)
    for earlier, later in zip(parsed, parsed[1:]):
        if earlier >= later:
            raise ValueError("slot labels must be unique and in ascending order")
    return labels


class SlotCatalog:
    """Bookable time-of-day slots and capacity bound per resource."""

    def __init__(self, *, default_capacity: int = DEFAULT_CAPACITY) -> None:
        if default_capacity < 1:
            raise ValueError("default_capacity must be >= 1")
        self.default_capacity = default_capacity
        self._entries: dict[str, CatalogEntry] = {}

    def register(
        self,
        resource_id: str,
        slots: Iterable[str] | None = None,
        capacity: int | None = None,
    ) -> CatalogEntry:
        if not resource_id:
            raise ValueError("resource_id must not be empty")
        if capacity is None:
            capacity = self.default_capacity
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        entry = CatalogEntry(
            slots=_normalize_slots(DEFAULT_TIME_SLOTS if slots is None else slots),
            capacity=capacity,
        )
        self._entries[resource_id] = entry
        return entry

    def slots_for(self, resource_id: str) -> tuple[str, ...]:
        return self._entry(resource_id).slots

    def capacity_for(self, resource_id: str) -> int:
        return self._entry(resource_id).capacity

    def resources(self) -> list[str]:
        return list(self._entries)

    def _entry(self, resource_id: str) -> CatalogEntry:
        try:
            return self._entries[resource_id]
        except KeyError:
            raise UnknownResourceError(f"no slot catalog configured for resource {resource_id!r}") from None

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        default_capacity: int = DEFAULT_CAPACITY,
    ) -> "SlotCatalog":
        """
        Build a catalog from ``{"resources": {"<id>": {"slots": [...], "capacity": N}}}``.
        Both keys of a resource entry are optional.
        """
        catalog = cls(default_capacity=default_capacity)
        resources = data.get("resources", {})
        if not isinstance(resources, Mapping):
            raise ValueError("'resources' must be an object")
        for resource_id, entry in resources.items():
            entry = entry or {}
            if not isinstance(entry, Mapping):
                raise ValueError(f"catalog entry for {resource_id!r} must be an object")
            catalog.register(resource_id, slots=entry.get("slots"), capacity=entry.get("capacity"))
        return catalog


def load_slot_catalog(path: str | Path, *, default_capacity: int = DEFAULT_CAPACITY) -> SlotCatalog:
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    return SlotCatalog.from_mapping(data, default_capacity=default_capacity)
