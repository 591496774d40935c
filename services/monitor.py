"""Operations issued by the operator menu against a sensor registry."""

from __future__ import annotations

import logging
import threading
from functools import lru_cache
from typing import Any, Callable, List, Optional

from channels.line_channel import LineChannel
from channels.serial_channel import SerialLineChannel
from datastore.registry import SensorRegistry
from errors import DuplicateSensorError, SensorNotFoundError
from models.records import SensorKind
from models.schemas import AggregateResult, SensorReport
from models.sensors import Measurement, SensorRecord, build_sensor, normalize_identifier
from services.ingestion import IngestionPipeline, IngestionStats
from settings import get_settings

logger = logging.getLogger(__name__)


class MonitorService:
    """Coordinates manual entry, stream ingestion and aggregation."""

    def __init__(
        self,
        registry: SensorRegistry,
        channel_factory: Callable[[], LineChannel] = SerialLineChannel,
        default_baud_rate: Optional[int] = None,
    ) -> None:
        self.registry = registry
        self.pipeline = IngestionPipeline(registry)
        self._channel_factory = channel_factory
        self._default_baud_rate = default_baud_rate

    def register_thermal(self, identifier: str) -> SensorRecord:
        return self._register(SensorKind.thermal, identifier)

    def register_barometric(self, identifier: str) -> SensorRecord:
        return self._register(SensorKind.barometric, identifier)

    def add_manual_reading(self, identifier: str, value: Any) -> Measurement:
        sensor = self.registry.lookup(identifier)
        if sensor is None:
            raise SensorNotFoundError(f"Sensor {identifier!r} is not registered.")
        measurement = sensor.add_reading(value)
        logger.info(
            "Manual reading stored",
            extra={"sensor_id": sensor.identifier, "value": measurement},
        )
        return measurement

    def process_all(self) -> List[AggregateResult]:
        results: List[AggregateResult] = []
        self.registry.for_each_sensor(lambda sensor: results.append(sensor.process()))
        return results

    def reports(self) -> List[SensorReport]:
        return [sensor.report() for sensor in self.registry.sensors()]

    def connect_and_ingest(
        self,
        address: str,
        baud_rate: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
    ) -> IngestionStats:
        """Open ``address`` and ingest until the stream ends or is cancelled.

        ``ChannelConnectionError`` propagates when the device cannot be opened.
        """
        rate = baud_rate if baud_rate is not None else self._default_baud_rate
        channel = self._channel_factory()
        channel.open(address, rate)
        with channel:
            return self.ingest_channel(channel, cancel=cancel)

    def ingest_channel(
        self,
        channel: LineChannel,
        cancel: Optional[threading.Event] = None,
    ) -> IngestionStats:
        return self.pipeline.run(channel, cancel=cancel)

    def shutdown(self) -> None:
        self.registry.clear()

    def _register(self, kind: SensorKind, identifier: str) -> SensorRecord:
        key = normalize_identifier(identifier)
        if self.registry.lookup(key) is not None:
            raise DuplicateSensorError(f"Sensor {key!r} is already registered.")
        sensor = build_sensor(kind, key)
        self.registry.register_sensor(sensor)
        logger.info(
            "Sensor registered manually",
            extra={"sensor_id": key, "kind": kind.value},
        )
        return sensor


@lru_cache
def build_default_monitor() -> MonitorService:
    """Factory that wires the monitor with an empty registry and serial channels."""
    settings = get_settings()
    return MonitorService(
        registry=SensorRegistry(),
        channel_factory=SerialLineChannel,
        default_baud_rate=settings.baud_rate,
    )
