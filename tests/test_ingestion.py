"""Reading pipeline against an in-memory storage collaborator."""
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from healthtrack.errors import EnrichmentError, StorageError, ValidationError
from healthtrack.services.classifier import BLOOD_PRESSURE, BLOOD_SUGAR, BloodPressure, BloodSugar
from healthtrack.services.enrichment import EnrichmentResult
from healthtrack.services.guard import TIMEOUT_SUGGESTION
from healthtrack.services.ingestion import analyze, ingest, parse_measurement


@pytest.mark.asyncio
async def test_ingest_blood_sugar(storage_factory, analyst):
    storage = storage_factory(recent=[SimpleNamespace(value=110), SimpleNamespace(value=95)])

    stored = await ingest(BLOOD_SUGAR, {'value': 65, 'timestamp': '2026-03-01T08:30:00Z'},
                          user_id=7, storage=storage, analyst=analyst)

    assert stored.id == 1
    assert stored.status.status == 'Low'
    assert stored.status.status_type == 'elevated'
    assert stored.enrichment == EnrichmentResult('Normal', 'Keep up the good work.', 12)
    assert storage.recent_calls == [(7, BLOOD_SUGAR, 5)]

    measurement, priors = analyst.enrich.await_args.args
    assert measurement == BloodSugar(65, datetime(2026, 3, 1, 8, 30), '')
    assert priors == [110, 95]

    kind, payload = storage.created[0]
    assert kind == BLOOD_SUGAR
    assert payload['user_id'] == 7
    assert payload['value'] == 65
    assert payload['status'] == 'Low'
    assert payload['ai_analysis']['riskLevel'] == 12


@pytest.mark.asyncio
async def test_ingest_blood_pressure_view(storage_factory, analyst):
    storage = storage_factory(recent=[SimpleNamespace(systolic=120, diastolic=80)])

    stored = await ingest(
        BLOOD_PRESSURE,
        {'systolic': 125, 'diastolic': 78, 'timestamp': '2026-03-01T08:30:00+02:00', 'notes': 'after run'},
        user_id=3, storage=storage, analyst=analyst,
    )

    assert analyst.enrich.await_args.args[1] == [{'systolic': 120, 'diastolic': 80}]
    view = stored.to_dict()
    assert view['systolic'] == 125
    assert view['diastolic'] == 78
    assert view['value'] == '125/78'
    assert view['timestamp'] == '2026-03-01T06:30:00Z'
    assert view['notes'] == 'after run'
    assert view['status'] == 'Elevated'
    assert view['statusType'] == 'elevated'
    assert view['aiAnalysis']['suggestion'] == 'Keep up the good work.'


@pytest.mark.asyncio
async def test_enrichment_failure_still_stores_fallback(storage_factory):
    analyst = AsyncMock()
    analyst.enrich.side_effect = EnrichmentError('AI request failed: connection refused')
    storage = storage_factory()

    stored = await ingest(BLOOD_SUGAR, {'value': 200, 'timestamp': '2026-03-01T08:30:00Z'},
                          user_id=1, storage=storage, analyst=analyst)

    assert stored.enrichment.suggestion == TIMEOUT_SUGGESTION
    assert stored.enrichment.risk_level == 70
    assert stored.enrichment.status == 'High'
    assert len(storage.created) == 1


@pytest.mark.asyncio
async def test_validation_error_lists_each_field(storage_factory, analyst):
    storage = storage_factory()
    with pytest.raises(ValidationError) as excinfo:
        await ingest(BLOOD_PRESSURE, {'systolic': 300, 'diastolic': 'high'},
                     user_id=1, storage=storage, analyst=analyst)

    assert excinfo.value.errors == [
        'Systolic must be between 70 and 250',
        'Diastolic must be an integer',
        'Timestamp is required',
    ]
    assert storage.recent_calls == []
    analyst.enrich.assert_not_called()


@pytest.mark.asyncio
async def test_storage_failure_propagates(storage_factory, analyst):
    storage = storage_factory(fail_on_create=StorageError('Database error during create_reading'))
    with pytest.raises(StorageError):
        await ingest(BLOOD_SUGAR, {'value': 100, 'timestamp': '2026-03-01T08:30:00Z'},
                     user_id=1, storage=storage, analyst=analyst)


def test_parse_measurement_rejects_non_object():
    with pytest.raises(ValidationError) as excinfo:
        parse_measurement(BLOOD_SUGAR, [100])
    assert excinfo.value.errors == ['Request body must be a JSON object']


def test_parse_measurement_accepts_integral_float():
    measurement = parse_measurement(BLOOD_SUGAR, {'value': 100.0, 'timestamp': '2026-03-01T08:30:00'})
    assert measurement.value == 100
    assert isinstance(measurement.value, int)


@pytest.mark.asyncio
async def test_analyze_trims_previous_readings(analyst):
    result = await analyze(BLOOD_SUGAR, {'value': 140, 'previousReadings': [1, 2, 3, 4, 5, 6, 7]}, analyst)

    assert result.status == 'Normal'
    measurement, priors = analyst.enrich.await_args.args
    assert measurement == BloodSugar(140)
    assert priors == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_analyze_blood_pressure_falls_back(analyst):
    analyst.enrich.side_effect = EnrichmentError('AI analysis returned invalid JSON')
    result = await analyze(BLOOD_PRESSURE, {'systolic': 150, 'diastolic': 95}, analyst)

    assert result == EnrichmentResult('Hypertension Stage 2', TIMEOUT_SUGGESTION, 70)
    assert analyst.enrich.await_args.args[0] == BloodPressure(150, 95)


@pytest.mark.asyncio
async def test_analyze_rejects_bad_previous_readings(analyst):
    with pytest.raises(ValidationError):
        await analyze(BLOOD_PRESSURE, {'systolic': 120, 'diastolic': 80, 'previousReadings': [120]}, analyst)
