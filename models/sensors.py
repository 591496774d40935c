"""Sensor variants and their aggregation rules."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Literal, Type, Union

from errors import RecordFormatError
from models.records import SensorKind
from models.schemas import AggregateResult, SensorReport
from storage.owning_sequence import OwningSequence

logger = logging.getLogger(__name__)

IDENTIFIER_MAX_LENGTH = 49

Measurement = Union[float, int]


def normalize_identifier(identifier: str) -> str:
    """Strip surrounding whitespace and truncate to ``IDENTIFIER_MAX_LENGTH``."""
    if not isinstance(identifier, str):
        raise TypeError("Sensor identifier must be a string.")
    candidate = identifier.strip()
    if not candidate:
        raise ValueError("Sensor identifier must not be empty.")
    if len(candidate) > IDENTIFIER_MAX_LENGTH:
        logger.debug(
            "Truncating sensor identifier",
            extra={"sensor_id": candidate, "reason": "identifier too long"},
        )
        candidate = candidate[:IDENTIFIER_MAX_LENGTH]
    return candidate


class SensorRecord(ABC):
    """A named sensor that owns its measurement history."""

    kind: ClassVar[SensorKind]
    unit: ClassVar[str]
    aggregate_name: ClassVar[Literal["minimum", "mean"]]

    def __init__(self, identifier: str) -> None:
        self._identifier = normalize_identifier(identifier)
        self._readings: OwningSequence[Measurement] = OwningSequence()

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def readings(self) -> OwningSequence[Measurement]:
        return self._readings

    def add_reading(self, value: Any) -> Measurement:
        """Coerce ``value`` to this sensor's measurement type and store it."""
        measurement = self.coerce(value)
        self._readings.append(measurement)
        logger.debug(
            "Reading stored",
            extra={"sensor_id": self._identifier, "value": measurement},
        )
        return measurement

    def process(self) -> AggregateResult:
        """Aggregate the full history; an empty history reports no data."""
        count = self._readings.size()
        value = None if count == 0 else self._aggregate()
        result = AggregateResult(
            sensor_id=self._identifier,
            kind=self.kind,
            aggregate=self.aggregate_name,
            value=value,
            count=count,
        )
        if result.has_data:
            logger.info(
                "Computed %s", self.aggregate_name,
                extra={"sensor_id": self._identifier, "value": value, "reading_count": count},
            )
        else:
            logger.info("No data to process", extra={"sensor_id": self._identifier})
        return result

    def report(self) -> SensorReport:
        return SensorReport(
            sensor_id=self._identifier,
            kind=self.kind,
            unit=self.unit,
            count=self._readings.size(),
            readings=list(self._readings),
        )

    @classmethod
    @abstractmethod
    def coerce(cls, value: Any) -> Measurement:
        """Convert a raw value to the measurement type of this variant."""

    @abstractmethod
    def _aggregate(self) -> float:
        """Compute the aggregate over a non-empty history."""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(identifier={self._identifier!r}, "
            f"readings={self._readings.size()})"
        )


class ThermalSensor(SensorRecord):
    """Temperature sensor in degrees Celsius; aggregates to the minimum."""

    kind = SensorKind.thermal
    unit = "C"
    aggregate_name = "minimum"

    @classmethod
    def coerce(cls, value: Any) -> float:
        if isinstance(value, bool):
            raise RecordFormatError(f"Invalid temperature value {value!r}")
        try:
            parsed = float(value.strip() if isinstance(value, str) else value)
        except (TypeError, ValueError) as exc:
            raise RecordFormatError(f"Invalid temperature value {value!r}") from exc
        if not math.isfinite(parsed):
            raise RecordFormatError(f"Invalid temperature value {value!r}")
        return parsed

    def _aggregate(self) -> float:
        minimum: float | None = None

        def track(measurement: float) -> None:
            nonlocal minimum
            if minimum is None or measurement < minimum:
                minimum = measurement

        self._readings.for_each(track)
        assert minimum is not None
        return minimum


class BarometricSensor(SensorRecord):
    """Pressure sensor in Pascals; aggregates to the arithmetic mean."""

    kind = SensorKind.barometric
    unit = "Pa"
    aggregate_name = "mean"

    @classmethod
    def coerce(cls, value: Any) -> int:
        if isinstance(value, bool):
            raise RecordFormatError(f"Invalid pressure value {value!r}")
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if not value.is_integer():
                raise RecordFormatError(f"Pressure must be an integer, got {value!r}")
            return int(value)
        try:
            return int(value.strip() if isinstance(value, str) else value)
        except (TypeError, ValueError) as exc:
            raise RecordFormatError(f"Invalid pressure value {value!r}") from exc

    def _aggregate(self) -> float:
        total = 0
        count = 0

        def accumulate(measurement: int) -> None:
            nonlocal total, count
            total += measurement
            count += 1

        self._readings.for_each(accumulate)
        return total / count


SENSOR_TYPES: Dict[SensorKind, Type[SensorRecord]] = {
    SensorKind.thermal: ThermalSensor,
    SensorKind.barometric: BarometricSensor,
}


def build_sensor(kind: SensorKind, identifier: str) -> SensorRecord:
    """Construct the sensor variant registered for ``kind``."""
    return SENSOR_TYPES[kind](identifier)
