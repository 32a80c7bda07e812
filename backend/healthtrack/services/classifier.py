"""
Deterministic status classification for readings.

Thresholds are simple ordered range checks, first match wins. They are
advisory labels for the dashboard, not a diagnosis.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

BLOOD_SUGAR = 'blood_sugar'
BLOOD_PRESSURE = 'blood_pressure'
READING_KINDS = (BLOOD_SUGAR, BLOOD_PRESSURE)

STATUS_NORMAL = 'normal'
STATUS_ELEVATED = 'elevated'


@dataclass(frozen=True)
class BloodSugar:
    value: int
    timestamp: Optional[datetime] = None
    notes: str = ''

    kind = BLOOD_SUGAR


@dataclass(frozen=True)
class BloodPressure:
    systolic: int
    diastolic: int
    timestamp: Optional[datetime] = None
    notes: str = ''

    kind = BLOOD_PRESSURE


Measurement = Union[BloodSugar, BloodPressure]


@dataclass(frozen=True)
class StatusResult:
    status: str
    status_type: str

    def to_dict(self):
        return {'status': self.status, 'statusType': self.status_type}


def classify_blood_sugar(value: int) -> StatusResult:
    if value < 70:
        return StatusResult('Low', STATUS_ELEVATED)
    if value < 80:
        return StatusResult('Borderline Low', STATUS_ELEVATED)
    if value <= 130:
        return StatusResult('Normal', STATUS_NORMAL)
    if value <= 180:
        return StatusResult('Elevated', STATUS_ELEVATED)
    return StatusResult('High', STATUS_ELEVATED)


def classify_blood_pressure(systolic: int, diastolic: int) -> StatusResult:
    # Row order matters: the "or" rows overlap with clinical stage 2 ranges
    # (e.g. 150/85 lands in Stage 1). Kept as-is; see DESIGN.md.
    if systolic < 90 or diastolic < 60:
        return StatusResult('Low', STATUS_ELEVATED)
    if systolic < 120 and diastolic < 80:
        return StatusResult('Normal', STATUS_NORMAL)
    if systolic < 130 and diastolic < 80:
        return StatusResult('Elevated', STATUS_ELEVATED)
    if systolic < 140 or diastolic < 90:
        return StatusResult('Hypertension Stage 1', STATUS_ELEVATED)
    if systolic < 180 or diastolic < 120:
        return StatusResult('Hypertension Stage 2', STATUS_ELEVATED)
    return StatusResult('Hypertensive Crisis', STATUS_ELEVATED)


def classify(measurement: Measurement) -> StatusResult:
    if isinstance(measurement, BloodSugar):
        return classify_blood_sugar(measurement.value)
    if isinstance(measurement, BloodPressure):
        return classify_blood_pressure(measurement.systolic, measurement.diastolic)
    raise TypeError(f'Unsupported measurement: {measurement!r}')


def fallback_risk_level(measurement: Measurement) -> int:
    """Risk score (0-100) used when no AI analysis is available."""
    if isinstance(measurement, BloodSugar):
        value = measurement.value
        if value > 180 or value < 70:
            return 70
        if value > 140 or value < 80:
            return 40
        return 10

    systolic, diastolic = measurement.systolic, measurement.diastolic
    if systolic > 140 or diastolic > 90:
        return 70
    if systolic > 120 or diastolic > 80:
        return 40
    return 10
