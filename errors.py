"""Error taxonomy shared by channels, sensors and the ingestion pipeline."""

from __future__ import annotations


class TelemetryError(Exception):
    """Base class for all telemetry errors."""


class ChannelConnectionError(TelemetryError, ConnectionError):
    """The line-delivery device could not be opened."""

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(f"Unable to open {address!r}: {reason}")
        self.address = address
        self.reason = reason


class ChannelReadError(TelemetryError, OSError):
    """The underlying transport failed while reading."""


class ChannelStateError(TelemetryError, RuntimeError):
    """A channel operation was attempted in the wrong state."""


class RecordFormatError(TelemetryError, ValueError):
    """A record line or a measurement value could not be parsed."""


class UnknownSensorTypeError(RecordFormatError):
    """The record's type tag names no known sensor variant."""


class VariantMismatchError(TelemetryError, ValueError):
    """A reading's type tag disagrees with the sensor already registered."""

    def __init__(self, identifier: str, expected: str, received: str) -> None:
        super().__init__(
            f"Sensor {identifier!r} is registered as {expected}, got a {received} reading"
        )
        self.identifier = identifier
        self.expected = expected
        self.received = received


class DuplicateSensorError(TelemetryError, ValueError):
    """A sensor with the same identifier is already registered."""


class SensorNotFoundError(TelemetryError, KeyError):
    """No sensor is registered under the requested identifier."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
