"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from errors import UnknownSensorTypeError


class SensorKind(str, Enum):
    """Closed set of sensor variants, keyed by their one-letter protocol tag."""

    thermal = "thermal"
    barometric = "barometric"

    @property
    def tag(self) -> str:
        return _KIND_TAGS[self]

    @classmethod
    def from_tag(cls, tag: str) -> SensorKind:
        candidate = tag.strip().upper()
        for kind, kind_tag in _KIND_TAGS.items():
            if candidate == kind_tag:
                return kind
        raise UnknownSensorTypeError(f"Unknown sensor type tag {tag!r}")


_KIND_TAGS = {
    SensorKind.thermal: "T",
    SensorKind.barometric: "P",
}


@dataclass(slots=True, frozen=True)
class Record:
    """A single reading parsed from one protocol line."""

    kind: SensorKind
    identifier: str
    value: float | int
