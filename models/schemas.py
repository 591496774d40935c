"""Pydantic schemas describing sensor aggregates and reports."""

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from models.records import SensorKind


class AggregateResult(BaseModel):
    """Summary value computed by a sensor's ``process`` step."""

    sensor_id: str
    kind: SensorKind
    aggregate: Literal["minimum", "mean"]
    value: Optional[float] = Field(
        default=None, description="Aggregate value, or None when there is no data."
    )
    count: int = Field(..., ge=0)

    @property
    def has_data(self) -> bool:
        return self.value is not None


class SensorReport(BaseModel):
    """Ordered dump of a sensor's measurement history."""

    sensor_id: str
    kind: SensorKind
    unit: str
    count: int = Field(..., ge=0)
    readings: List[Union[int, float]] = Field(default_factory=list)
