"""
Reading ingestion: validate, classify, analyze (bounded), persist.

    validate -> recent readings -> classify -> guard(enrich) -> persist -> StoredReading

Validation and storage failures abort the request. AI analysis never does;
the guard substitutes a fallback.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from healthtrack.errors import ValidationError
from healthtrack.services.classifier import (
    BLOOD_PRESSURE, BLOOD_SUGAR, BloodPressure, BloodSugar, Measurement, StatusResult, classify,
)
from healthtrack.services.enrichment import MAX_PRIOR_VALUES, EnrichmentResult
from healthtrack.services.guard import DEFAULT_DEADLINE_SECONDS, guard
from healthtrack.utils.formatting import parse_timestamp, to_iso
from healthtrack.utils.validators import (
    validate_blood_pressure, validate_blood_pressure_analysis,
    validate_blood_sugar, validate_blood_sugar_analysis,
)

logger = logging.getLogger(__name__)

RECENT_READINGS_LIMIT = MAX_PRIOR_VALUES

_READING_VALIDATORS = {
    BLOOD_SUGAR: validate_blood_sugar,
    BLOOD_PRESSURE: validate_blood_pressure,
}

_ANALYSIS_VALIDATORS = {
    BLOOD_SUGAR: validate_blood_sugar_analysis,
    BLOOD_PRESSURE: validate_blood_pressure_analysis,
}


@dataclass(frozen=True)
class StoredReading:
    id: int
    measurement: Measurement
    status: StatusResult
    enrichment: EnrichmentResult
    created_at: Optional[datetime] = None

    def to_dict(self):
        m = self.measurement
        data = {'id': self.id}
        if isinstance(m, BloodSugar):
            data['value'] = m.value
        else:
            data['systolic'] = m.systolic
            data['diastolic'] = m.diastolic
            data['value'] = f'{m.systolic}/{m.diastolic}'
        data.update({
            'timestamp': to_iso(m.timestamp),
            'notes': m.notes,
            'status': self.status.status,
            'statusType': self.status.status_type,
            'aiAnalysis': self.enrichment.to_dict(),
        })
        return data


def _require_object(raw_input):
    if not isinstance(raw_input, dict):
        raise ValidationError(['Request body must be a JSON object'])


def parse_measurement(kind, raw_input) -> Measurement:
    """Validate a raw payload and build the typed measurement."""
    _require_object(raw_input)
    errors = _READING_VALIDATORS[kind](raw_input)
    if errors:
        raise ValidationError(errors)

    timestamp = parse_timestamp(raw_input['timestamp'])
    notes = raw_input.get('notes') or ''
    if kind == BLOOD_SUGAR:
        return BloodSugar(value=int(raw_input['value']), timestamp=timestamp, notes=notes)
    return BloodPressure(
        systolic=int(raw_input['systolic']),
        diastolic=int(raw_input['diastolic']),
        timestamp=timestamp,
        notes=notes,
    )


def prior_value(reading):
    """What the analysis prompt needs from an earlier stored reading."""
    if isinstance(reading, dict):
        return {'systolic': reading['systolic'], 'diastolic': reading['diastolic']}
    if hasattr(reading, 'systolic'):
        return {'systolic': reading.systolic, 'diastolic': reading.diastolic}
    return reading.value


def _reading_payload(user_id, measurement: Measurement, status: StatusResult,
                     enrichment: EnrichmentResult) -> dict:
    payload = {
        'user_id': user_id,
        'timestamp': measurement.timestamp,
        'notes': measurement.notes,
        'status': status.status,
        'ai_analysis': enrichment.to_dict(),
    }
    if isinstance(measurement, BloodSugar):
        payload['value'] = measurement.value
    else:
        payload['systolic'] = measurement.systolic
        payload['diastolic'] = measurement.diastolic
    return payload


async def ingest(kind, raw_input, user_id, storage, analyst,
                 deadline: float = DEFAULT_DEADLINE_SECONDS) -> StoredReading:
    """
    Ingest one reading for `user_id`.

    Raises ValidationError for out-of-domain input and StorageError when the
    database read or write fails. AI analysis problems are absorbed.
    """
    measurement = parse_measurement(kind, raw_input)

    recent = storage.get_recent_readings(user_id, kind, RECENT_READINGS_LIMIT)
    prior_values = [prior_value(r) for r in recent]

    status = classify(measurement)

    enrichment = await guard(analyst.enrich(measurement, prior_values), measurement, deadline)

    record = storage.create_reading(kind, _reading_payload(user_id, measurement, status, enrichment))
    logger.info('Stored %s reading id=%s user_id=%s status=%s', kind, record.id, user_id, status.status)

    return StoredReading(
        id=record.id,
        measurement=measurement,
        status=status,
        enrichment=enrichment,
        created_at=record.created_at,
    )


async def analyze(kind, raw_input, analyst,
                  deadline: float = DEFAULT_DEADLINE_SECONDS) -> EnrichmentResult:
    """Ad-hoc analysis of a value without storing it."""
    _require_object(raw_input)
    errors = _ANALYSIS_VALIDATORS[kind](raw_input)
    if errors:
        raise ValidationError(errors)

    previous = (raw_input.get('previousReadings') or [])[:MAX_PRIOR_VALUES]
    if kind == BLOOD_SUGAR:
        measurement = BloodSugar(value=int(raw_input['value']))
    else:
        measurement = BloodPressure(systolic=int(raw_input['systolic']),
                                    diastolic=int(raw_input['diastolic']))
        previous = [prior_value(r) for r in previous]

    return await guard(analyst.enrich(measurement, previous), measurement, deadline)
