"""
AI analysis of readings through an OpenAI-compatible chat completions API.

The model's reply is untrusted text: it is parsed as JSON and checked against
the EnrichmentResult shape. Anything else raises EnrichmentError; this module
never returns a partially populated result.
"""
import json
import logging
import math
import time
from dataclasses import dataclass
from typing import List, Optional

from openai import AsyncOpenAI

from healthtrack.errors import EnrichmentError
from healthtrack.services.classifier import BloodSugar, Measurement

logger = logging.getLogger(__name__)

MAX_PRIOR_VALUES = 5

ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_MAX_TOKENS = 300

BLOOD_SUGAR_ANALYSIS_STATUSES = (
    'Normal', 'Elevated', 'High', 'Very High', 'Low', 'Very Low',
)
BLOOD_PRESSURE_ANALYSIS_STATUSES = (
    'Normal', 'Elevated', 'Hypertension Stage 1', 'Hypertension Stage 2',
    'Hypertensive Crisis', 'Low',
)

_RESPONSE_INSTRUCTIONS = """
Based on this information, provide a brief analysis with the following in JSON format:
1. "status": One of {statuses}
2. "suggestion": A brief medical suggestion (1-2 sentences)
3. "riskLevel": A number from 0-100 representing health risk (0 is lowest risk, 100 is highest)

Response must be valid JSON.
"""


@dataclass(frozen=True)
class EnrichmentResult:
    status: str
    suggestion: str
    risk_level: int

    def to_dict(self):
        return {
            'status': self.status,
            'suggestion': self.suggestion,
            'riskLevel': self.risk_level,
        }


def _format_prior(value) -> str:
    if isinstance(value, dict):
        return f"{value['systolic']}/{value['diastolic']}"
    return str(value)


def build_prompt(measurement: Measurement, prior_values: Optional[list] = None) -> str:
    """Prompt for a single reading plus up to five earlier ones (newest first)."""
    prior = list(prior_values or [])[:MAX_PRIOR_VALUES]
    history = ', '.join(_format_prior(v) for v in prior) if prior else 'None'

    if isinstance(measurement, BloodSugar):
        header = (
            "You are a medical AI assistant helping analyze a blood sugar reading.\n"
            f"Value: {measurement.value} mg/dL\n"
        )
        statuses = BLOOD_SUGAR_ANALYSIS_STATUSES
    else:
        header = (
            "You are a medical AI assistant helping analyze a blood pressure reading.\n"
            f"Systolic: {measurement.systolic} mmHg\n"
            f"Diastolic: {measurement.diastolic} mmHg\n"
        )
        statuses = BLOOD_PRESSURE_ANALYSIS_STATUSES

    instructions = _RESPONSE_INSTRUCTIONS.format(statuses=json.dumps(list(statuses)))
    return f"{header}Previous readings: {history}\n{instructions}"


def allowed_statuses(measurement: Measurement) -> tuple:
    if isinstance(measurement, BloodSugar):
        return BLOOD_SUGAR_ANALYSIS_STATUSES
    return BLOOD_PRESSURE_ANALYSIS_STATUSES


def parse_enrichment(content: Optional[str], statuses: tuple) -> EnrichmentResult:
    """Validate a model reply against the EnrichmentResult shape."""
    if not content:
        raise EnrichmentError('AI analysis returned an empty response')
    try:
        data = json.loads(content)
    except ValueError as exc:
        raise EnrichmentError('AI analysis returned invalid JSON') from exc

    if not isinstance(data, dict):
        raise EnrichmentError('AI analysis must be a JSON object')

    status = data.get('status')
    if not isinstance(status, str) or status not in statuses:
        raise EnrichmentError(f'AI analysis has an invalid status: {status!r}')

    suggestion = data.get('suggestion')
    if not isinstance(suggestion, str) or not suggestion.strip():
        raise EnrichmentError('AI analysis is missing a suggestion')

    risk = data.get('riskLevel')
    if (isinstance(risk, bool) or not isinstance(risk, (int, float))
            or not math.isfinite(risk) or risk != int(risk)):
        raise EnrichmentError(f'AI analysis has an invalid riskLevel: {risk!r}')
    if not 0 <= risk <= 100:
        raise EnrichmentError(f'AI analysis riskLevel out of range: {risk!r}')

    return EnrichmentResult(status=status, suggestion=suggestion.strip(), risk_level=int(risk))


class AnalysisClient:
    """
    Thin async wrapper around the chat completions endpoint.

    One instance per request: the underlying HTTP pool is bound to the event
    loop it was first used on. Use as an async context manager.
    """

    def __init__(self, api_key: str = '', model: str = 'gpt-4o',
                 base_url: Optional[str] = None, timeout: float = 50.0, client=None):
        self.model = model
        self._client = client
        if self._client is None and api_key:
            self._client = AsyncOpenAI(api_key=api_key, base_url=base_url,
                                       timeout=timeout, max_retries=0)

    @classmethod
    def from_config(cls, config) -> 'AnalysisClient':
        return cls(
            api_key=config.get('OPENAI_API_KEY', ''),
            model=config.get('OPENAI_MODEL', 'gpt-4o'),
            base_url=config.get('OPENAI_BASE_URL'),
            timeout=config.get('AI_ANALYSIS_TIMEOUT_SECONDS', 50.0),
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        if self._client is not None:
            await self._client.close()

    async def complete(self, prompt: str, temperature: float, max_tokens: int,
                       json_mode: bool = False) -> str:
        """Single-turn completion. Returns the raw message text."""
        if self._client is None:
            raise EnrichmentError('OPENAI_API_KEY is not configured')

        request = {
            'model': self.model,
            'messages': [{'role': 'user', 'content': prompt}],
            'temperature': temperature,
            'max_tokens': max_tokens,
        }
        if json_mode:
            request['response_format'] = {'type': 'json_object'}

        start = time.monotonic()
        try:
            response = await self._client.chat.completions.create(**request)
        except Exception as exc:
            raise EnrichmentError(f'AI request failed: {exc}') from exc
        logger.info('AI completion took %.0fms (model=%s)', (time.monotonic() - start) * 1000, self.model)

        if not response.choices:
            raise EnrichmentError('AI request returned no choices')
        return response.choices[0].message.content or ''

    async def enrich(self, measurement: Measurement, prior_values: Optional[List] = None) -> EnrichmentResult:
        """Analyze one reading in the context of earlier ones."""
        content = await self.complete(
            build_prompt(measurement, prior_values),
            temperature=ANALYSIS_TEMPERATURE,
            max_tokens=ANALYSIS_MAX_TOKENS,
            json_mode=True,
        )
        return parse_enrichment(content, allowed_statuses(measurement))
