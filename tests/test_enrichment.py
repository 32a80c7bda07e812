"""AI analysis client: prompt construction and strict reply parsing."""
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from healthtrack.errors import EnrichmentError
from healthtrack.services.classifier import BloodPressure, BloodSugar
from healthtrack.services.enrichment import (
    BLOOD_PRESSURE_ANALYSIS_STATUSES, BLOOD_SUGAR_ANALYSIS_STATUSES, AnalysisClient,
    EnrichmentResult, allowed_statuses, build_prompt, parse_enrichment,
)


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _fake_openai(create):
    fake = MagicMock()
    fake.chat.completions.create = create
    fake.close = AsyncMock()
    return fake


def test_prompt_includes_value_and_prior_readings():
    prompt = build_prompt(BloodSugar(145), [120, 130, 110, 99, 101, 150])
    assert 'Value: 145 mg/dL' in prompt
    assert 'Previous readings: 120, 130, 110, 99, 101\n' in prompt
    assert '150' not in prompt.split('Previous readings:')[1].split('\n')[0]
    assert '"Very High"' in prompt


def test_prompt_formats_pressure_priors_as_pairs():
    prompt = build_prompt(BloodPressure(135, 85), [{'systolic': 120, 'diastolic': 80}])
    assert 'Systolic: 135 mmHg' in prompt
    assert 'Diastolic: 85 mmHg' in prompt
    assert 'Previous readings: 120/80' in prompt
    assert '"Hypertensive Crisis"' in prompt


def test_prompt_without_priors_says_none():
    assert 'Previous readings: None' in build_prompt(BloodSugar(100), [])


def test_allowed_statuses_by_kind():
    assert allowed_statuses(BloodSugar(100)) == BLOOD_SUGAR_ANALYSIS_STATUSES
    assert allowed_statuses(BloodPressure(120, 80)) == BLOOD_PRESSURE_ANALYSIS_STATUSES


def test_parse_valid_reply():
    content = json.dumps({'status': 'High', 'suggestion': ' Cut back on sugar. ', 'riskLevel': 65})
    result = parse_enrichment(content, BLOOD_SUGAR_ANALYSIS_STATUSES)
    assert result == EnrichmentResult('High', 'Cut back on sugar.', 65)
    assert result.to_dict() == {'status': 'High', 'suggestion': 'Cut back on sugar.', 'riskLevel': 65}


def test_parse_coerces_integral_float_risk():
    content = json.dumps({'status': 'Normal', 'suggestion': 'Fine.', 'riskLevel': 20.0})
    assert parse_enrichment(content, BLOOD_SUGAR_ANALYSIS_STATUSES).risk_level == 20


@pytest.mark.parametrize('content', [
    None,
    '',
    'not json',
    '[1, 2]',
    json.dumps({'suggestion': 'x', 'riskLevel': 10}),
    json.dumps({'status': 'Borderline Low', 'suggestion': 'x', 'riskLevel': 10}),
    json.dumps({'status': 'Normal', 'suggestion': '', 'riskLevel': 10}),
    json.dumps({'status': 'Normal', 'suggestion': 7, 'riskLevel': 10}),
    json.dumps({'status': 'Normal', 'suggestion': 'x'}),
    json.dumps({'status': 'Normal', 'suggestion': 'x', 'riskLevel': '10'}),
    json.dumps({'status': 'Normal', 'suggestion': 'x', 'riskLevel': True}),
    json.dumps({'status': 'Normal', 'suggestion': 'x', 'riskLevel': 10.5}),
    json.dumps({'status': 'Normal', 'suggestion': 'x', 'riskLevel': 101}),
    json.dumps({'status': 'Normal', 'suggestion': 'x', 'riskLevel': -1}),
    '{"status": "Normal", "suggestion": "x", "riskLevel": NaN}',
])
def test_parse_rejects_malformed_replies(content):
    with pytest.raises(EnrichmentError):
        parse_enrichment(content, BLOOD_SUGAR_ANALYSIS_STATUSES)


def test_parse_error_chains_json_cause():
    with pytest.raises(EnrichmentError) as excinfo:
        parse_enrichment('{broken', BLOOD_SUGAR_ANALYSIS_STATUSES)
    assert isinstance(excinfo.value.__cause__, ValueError)


@pytest.mark.asyncio
async def test_enrich_sends_json_mode_request():
    create = AsyncMock(return_value=_completion(
        json.dumps({'status': 'Elevated', 'suggestion': 'Recheck tomorrow.', 'riskLevel': 35})
    ))
    analyst = AnalysisClient(model='gpt-test', client=_fake_openai(create))

    result = await analyst.enrich(BloodPressure(125, 78), [{'systolic': 118, 'diastolic': 76}])

    assert result == EnrichmentResult('Elevated', 'Recheck tomorrow.', 35)
    kwargs = create.await_args.kwargs
    assert kwargs['model'] == 'gpt-test'
    assert kwargs['response_format'] == {'type': 'json_object'}
    assert kwargs['temperature'] == 0.3
    assert kwargs['max_tokens'] == 300
    assert '118/76' in kwargs['messages'][0]['content']


@pytest.mark.asyncio
async def test_transport_failure_becomes_enrichment_error():
    boom = ConnectionError('connection refused')
    analyst = AnalysisClient(client=_fake_openai(AsyncMock(side_effect=boom)))

    with pytest.raises(EnrichmentError) as excinfo:
        await analyst.enrich(BloodSugar(100))
    assert excinfo.value.__cause__ is boom


@pytest.mark.asyncio
async def test_missing_api_key_raises():
    analyst = AnalysisClient(api_key='')
    with pytest.raises(EnrichmentError):
        await analyst.complete('hello', temperature=0.5, max_tokens=10)


@pytest.mark.asyncio
async def test_no_choices_raises():
    analyst = AnalysisClient(client=_fake_openai(AsyncMock(return_value=SimpleNamespace(choices=[]))))
    with pytest.raises(EnrichmentError):
        await analyst.complete('hello', temperature=0.5, max_tokens=10)


@pytest.mark.asyncio
async def test_context_manager_closes_client():
    fake = _fake_openai(AsyncMock())
    async with AnalysisClient(client=fake):
        pass
    fake.close.assert_awaited_once()


def test_from_config_reads_model_and_key():
    analyst = AnalysisClient.from_config({'OPENAI_API_KEY': '', 'OPENAI_MODEL': 'gpt-4o-mini'})
    assert analyst.model == 'gpt-4o-mini'
