from __future__ import annotations

import io

import pytest

from channels.line_channel import LineChannel, StreamLineChannel
from datastore.registry import SensorRegistry
from errors import (
    ChannelConnectionError,
    DuplicateSensorError,
    RecordFormatError,
    SensorNotFoundError,
)
from services.monitor import MonitorService


class ReplayChannel(StreamLineChannel):
    """Serves a fixed payload regardless of the address it is opened on."""

    def __init__(self, payload: bytes) -> None:
        super().__init__(poll_interval=0)
        self.payload = payload
        self.opened_with: tuple | None = None

    def _connect(self, address, baud_rate) -> None:
        self.opened_with = (address, baud_rate)
        self._stream = io.BytesIO(self.payload)
        self._owns_stream = True


class UnreachableChannel(StreamLineChannel):
    def _connect(self, address, baud_rate) -> None:
        raise ChannelConnectionError(address, "permission denied")


@pytest.fixture()
def monitor() -> MonitorService:
    return MonitorService(registry=SensorRegistry())


def test_manual_registration_and_processing(monitor: MonitorService) -> None:
    monitor.register_thermal("TEMP-001")
    monitor.register_barometric("PRES-105")
    for value in ("5.0", "2.0", "9.0"):
        monitor.add_manual_reading("TEMP-001", value)
    monitor.add_manual_reading("PRES-105", "101")
    monitor.add_manual_reading("PRES-105", 102)

    results = monitor.process_all()

    assert [(r.sensor_id, r.aggregate, r.value) for r in results] == [
        ("TEMP-001", "minimum", 2.0),
        ("PRES-105", "mean", 101.5),
    ]


def test_process_all_reports_no_data(monitor: MonitorService) -> None:
    monitor.register_thermal("EMPTY")

    (result,) = monitor.process_all()

    assert not result.has_data


def test_duplicate_registration_is_rejected(monitor: MonitorService) -> None:
    monitor.register_thermal("TEMP-001")

    with pytest.raises(DuplicateSensorError):
        monitor.register_barometric("TEMP-001")
    assert monitor.registry.size() == 1


def test_reading_for_unknown_sensor_is_rejected(monitor: MonitorService) -> None:
    with pytest.raises(SensorNotFoundError):
        monitor.add_manual_reading("NOPE", 1.0)


def test_reading_with_wrong_type_is_rejected(monitor: MonitorService) -> None:
    monitor.register_barometric("PRES-1")

    with pytest.raises(RecordFormatError):
        monitor.add_manual_reading("PRES-1", "12.5")


def test_connect_and_ingest_uses_channel_and_closes_it() -> None:
    channels: list[ReplayChannel] = []

    def factory() -> LineChannel:
        channel = ReplayChannel(b"Arduino listo\nT TEMP-1 23.5\nT TEMP-1 24.0\n")
        channels.append(channel)
        return channel

    monitor = MonitorService(registry=SensorRegistry(), channel_factory=factory, default_baud_rate=115200)

    stats = monitor.connect_and_ingest("/dev/ttyACM0")

    assert stats.accepted == 2
    assert channels[0].opened_with == ("/dev/ttyACM0", 115200)
    assert not channels[0].is_open()
    assert monitor.registry.lookup("TEMP-1").readings.size() == 2


def test_connection_failure_propagates() -> None:
    monitor = MonitorService(
        registry=SensorRegistry(),
        channel_factory=lambda: UnreachableChannel(poll_interval=0),
    )

    with pytest.raises(ChannelConnectionError):
        monitor.connect_and_ingest("/dev/ttyUSB0")
    assert monitor.registry.is_empty()


def test_reports_and_shutdown(monitor: MonitorService) -> None:
    monitor.register_thermal("T-1")
    monitor.add_manual_reading("T-1", 1.5)

    (report,) = monitor.reports()
    monitor.shutdown()

    assert report.readings == [1.5]
    assert monitor.registry.is_empty()
