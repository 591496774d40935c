"""Unit tests for sensor variants and their aggregates."""

from __future__ import annotations

import copy

import pytest

from errors import RecordFormatError, UnknownSensorTypeError
from models.records import SensorKind
from models.sensors import (
    IDENTIFIER_MAX_LENGTH,
    BarometricSensor,
    ThermalSensor,
    build_sensor,
    normalize_identifier,
)


def test_thermal_reports_minimum() -> None:
    sensor = ThermalSensor("TEMP-1")
    for value in (5.0, 2.0, 9.0):
        sensor.add_reading(value)

    result = sensor.process()

    assert result.has_data
    assert result.aggregate == "minimum"
    assert result.value == 2.0
    assert result.count == 3


def test_thermal_minimum_above_large_values() -> None:
    sensor = ThermalSensor("HOT")
    sensor.add_reading(1_500_000.0)
    sensor.add_reading(1_200_000.0)

    assert sensor.process().value == 1_200_000.0


def test_empty_history_reports_no_data() -> None:
    for sensor in (ThermalSensor("T-EMPTY"), BarometricSensor("P-EMPTY")):
        result = sensor.process()

        assert not result.has_data
        assert result.value is None
        assert result.count == 0


def test_barometric_reports_mean() -> None:
    sensor = BarometricSensor("PRES-1")
    for value in (100, 200, 300):
        sensor.add_reading(value)

    assert sensor.process().value == 200.0


def test_barometric_mean_keeps_fraction() -> None:
    sensor = BarometricSensor("PRES-2")
    sensor.add_reading(101)
    sensor.add_reading(102)

    result = sensor.process()

    assert result.aggregate == "mean"
    assert result.value == 101.5


def test_readings_are_coerced_to_variant_type() -> None:
    thermal = ThermalSensor("T")
    barometric = BarometricSensor("P")

    assert thermal.add_reading("23.5") == 23.5
    assert isinstance(thermal.add_reading(20), float)
    assert barometric.add_reading(" 101325 ") == 101325
    assert barometric.add_reading(100.0) == 100


@pytest.mark.parametrize("value", ["abc", "", True, float("nan")])
def test_thermal_rejects_invalid_values(value) -> None:
    with pytest.raises(RecordFormatError):
        ThermalSensor("T").add_reading(value)


@pytest.mark.parametrize("value", ["10.5", 10.5, "x", False])
def test_barometric_rejects_non_integers(value) -> None:
    sensor = BarometricSensor("P")

    with pytest.raises(RecordFormatError):
        sensor.add_reading(value)
    assert sensor.readings.size() == 0


def test_report_lists_readings_in_order_without_mutating() -> None:
    sensor = BarometricSensor("PRES-3")
    sensor.add_reading(5)
    sensor.add_reading(3)

    report = sensor.report()
    report_again = sensor.report()

    assert report.sensor_id == "PRES-3"
    assert report.kind is SensorKind.barometric
    assert report.unit == "Pa"
    assert report.count == 2
    assert report.readings == [5, 3]
    assert report_again == report


def test_identifier_is_truncated_and_read_only() -> None:
    sensor = ThermalSensor("X" * 60)

    assert sensor.identifier == "X" * IDENTIFIER_MAX_LENGTH
    with pytest.raises(AttributeError):
        sensor.identifier = "other"  # type: ignore[misc]


def test_blank_identifier_is_rejected() -> None:
    with pytest.raises(ValueError):
        normalize_identifier("   ")


def test_deep_copy_duplicates_history() -> None:
    sensor = ThermalSensor("T-COPY")
    sensor.add_reading(1.0)

    duplicate = copy.deepcopy(sensor)
    duplicate.add_reading(-4.0)

    assert sensor.readings.size() == 1
    assert sensor.process().value == 1.0
    assert duplicate.process().value == -4.0


def test_kind_tags_resolve_case_insensitively() -> None:
    assert SensorKind.from_tag("t") is SensorKind.thermal
    assert SensorKind.from_tag("P") is SensorKind.barometric
    assert isinstance(build_sensor(SensorKind.barometric, "B"), BarometricSensor)
    with pytest.raises(UnknownSensorTypeError):
        SensorKind.from_tag("X")
