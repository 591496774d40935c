from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Optional

from models.sensors import SensorRecord, normalize_identifier
from storage.owning_sequence import OwningSequence

logger = logging.getLogger(__name__)


class SensorRegistry:
    """Owns every known sensor, in registration order.

    Identifiers are not checked for uniqueness here: callers look a sensor up
    before registering a new one. When duplicates exist, ``lookup`` returns
    the first registered sensor.
    """

    def __init__(self) -> None:
        self._sensors: OwningSequence[SensorRecord] = OwningSequence()

    def lookup(self, identifier: str) -> Optional[SensorRecord]:
        try:
            key = normalize_identifier(identifier)
        except ValueError:
            return None
        return self._sensors.find_first(lambda sensor: sensor.identifier == key)

    def register_sensor(self, record: SensorRecord) -> SensorRecord:
        self._sensors.append(record)
        logger.debug(
            "Sensor registered",
            extra={"sensor_id": record.identifier, "kind": record.kind.value},
        )
        return record

    def for_each_sensor(self, operation: Callable[[SensorRecord], Any]) -> None:
        self._sensors.for_each(operation)

    def sensors(self) -> Iterator[SensorRecord]:
        return iter(self._sensors)

    def size(self) -> int:
        return self._sensors.size()

    def is_empty(self) -> bool:
        return self._sensors.is_empty()

    def clear(self) -> None:
        """Release every registered sensor along with its history."""
        released = self._sensors.size()
        self._sensors.clear()
        if released:
            logger.debug("Registry cleared, released %d sensors", released)

    def __len__(self) -> int:
        return self._sensors.size()

    def __iter__(self) -> Iterator[SensorRecord]:
        return iter(self._sensors)

    def __enter__(self) -> SensorRegistry:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.clear()
