"""Line-protocol ingestion from a channel into the sensor registry."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from channels.line_channel import LineChannel
from datastore.registry import SensorRegistry
from errors import RecordFormatError, UnknownSensorTypeError, VariantMismatchError
from models.records import Record, SensorKind
from models.sensors import SENSOR_TYPES, build_sensor, normalize_identifier

logger = logging.getLogger(__name__)

# Banner and format-hint text printed by the paired transmitter.
NOISE_MARKERS = ("===", "Arduino", "Formato")


class IngestOutcome(str, Enum):
    created = "created"
    appended = "appended"
    skipped = "skipped"
    malformed = "malformed"
    unknown_type = "unknown_type"
    mismatch = "mismatch"

    @property
    def accepted(self) -> bool:
        return self in (IngestOutcome.created, IngestOutcome.appended)


@dataclass
class IngestionStats:
    """Counters for one ingestion run."""

    lines_received: int = 0
    outcomes: Dict[IngestOutcome, int] = field(default_factory=dict)

    def record(self, outcome: IngestOutcome) -> None:
        self.lines_received += 1
        self.outcomes[outcome] = self.outcomes.get(outcome, 0) + 1

    def count(self, outcome: IngestOutcome) -> int:
        return self.outcomes.get(outcome, 0)

    @property
    def accepted(self) -> int:
        return sum(count for outcome, count in self.outcomes.items() if outcome.accepted)

    @property
    def rejected(self) -> int:
        return (
            self.count(IngestOutcome.malformed)
            + self.count(IngestOutcome.unknown_type)
            + self.count(IngestOutcome.mismatch)
        )


def is_noise(line: str) -> bool:
    """Return True for blank lines and transmitter banner text."""
    if not line.strip():
        return True
    return any(marker in line for marker in NOISE_MARKERS)


def parse_record(line: str) -> Record:
    """Parse ``<tag> <identifier> <value>``; tokens past the third are ignored."""
    tokens = line.split()
    if len(tokens) < 2:
        raise RecordFormatError("Expected '<type> <identifier> <value>'")

    tag, identifier = tokens[0], tokens[1]
    if len(tag) != 1:
        raise UnknownSensorTypeError(f"Unknown sensor type tag {tag!r}")
    kind = SensorKind.from_tag(tag)

    if len(tokens) < 3:
        raise RecordFormatError(f"Missing value for sensor {identifier!r}")
    value = SENSOR_TYPES[kind].coerce(tokens[2])

    return Record(kind=kind, identifier=normalize_identifier(identifier), value=value)


class IngestionPipeline:
    """Routes parsed records to sensors, creating them on first sight."""

    def __init__(self, registry: SensorRegistry) -> None:
        self.registry = registry

    def ingest_line(self, line: str) -> IngestOutcome:
        if is_noise(line):
            logger.debug("Skipping non-data line", extra={"line": line})
            return IngestOutcome.skipped

        try:
            record = parse_record(line)
        except UnknownSensorTypeError as exc:
            logger.warning(
                "Discarding line with unknown sensor type",
                extra={"line": line, "reason": str(exc)},
            )
            return IngestOutcome.unknown_type
        except RecordFormatError as exc:
            logger.warning(
                "Discarding malformed line",
                extra={"line": line, "reason": str(exc)},
            )
            return IngestOutcome.malformed

        try:
            return self._route(record)
        except VariantMismatchError as exc:
            logger.warning(
                "Discarding reading for mismatched sensor type",
                extra={"line": line, "sensor_id": record.identifier, "reason": str(exc)},
            )
            return IngestOutcome.mismatch

    def _route(self, record: Record) -> IngestOutcome:
        sensor = self.registry.lookup(record.identifier)
        if sensor is None:
            sensor = build_sensor(record.kind, record.identifier)
            sensor.add_reading(record.value)
            self.registry.register_sensor(sensor)
            logger.info(
                "New sensor registered from stream",
                extra={
                    "sensor_id": record.identifier,
                    "kind": record.kind.value,
                    "value": record.value,
                },
            )
            return IngestOutcome.created

        if sensor.kind is not record.kind:
            raise VariantMismatchError(
                record.identifier, sensor.kind.value, record.kind.value
            )

        sensor.add_reading(record.value)
        logger.info(
            "Reading stored",
            extra={
                "sensor_id": record.identifier,
                "value": record.value,
                "reading_count": sensor.readings.size(),
            },
        )
        return IngestOutcome.appended

    def run(
        self,
        channel: LineChannel,
        cancel: Optional[threading.Event] = None,
        max_records: Optional[int] = None,
    ) -> IngestionStats:
        """Consume lines until end of stream, cancellation or ``max_records`` accepted.

        ``KeyboardInterrupt`` ends the run like a cancellation. Channel read
        errors propagate to the caller.
        """
        stats = IngestionStats()
        try:
            while cancel is None or not cancel.is_set():
                if max_records is not None and stats.accepted >= max_records:
                    break
                line = channel.read_line(cancel)
                if line is None:
                    break
                stats.record(self.ingest_line(line))
        except KeyboardInterrupt:
            logger.info("Ingestion interrupted by operator")

        logger.info(
            "Ingestion finished: %d lines, %d accepted, %d rejected",
            stats.lines_received,
            stats.accepted,
            stats.rejected,
            extra={"address": channel.address},
        )
        return stats
