"""
Deadline for AI analysis with a deterministic fallback.
"""
import asyncio
import logging
from typing import Awaitable

from healthtrack.services.classifier import Measurement, classify, fallback_risk_level
from healthtrack.services.enrichment import EnrichmentResult

logger = logging.getLogger(__name__)

DEFAULT_DEADLINE_SECONDS = 50.0
TIMEOUT_SUGGESTION = 'Analysis timed out. Please try again later.'


def fallback_enrichment(measurement: Measurement) -> EnrichmentResult:
    return EnrichmentResult(
        status=classify(measurement).status,
        suggestion=TIMEOUT_SUGGESTION,
        risk_level=fallback_risk_level(measurement),
    )


async def guard(operation: Awaitable[EnrichmentResult], measurement: Measurement,
                deadline: float = DEFAULT_DEADLINE_SECONDS) -> EnrichmentResult:
    """
    Await `operation` for at most `deadline` seconds.

    Returns the operation's result when it completes in time. On timeout the
    operation is cancelled; on timeout or any failure the classifier-derived
    fallback is returned instead. Never raises for enrichment problems.
    """
    try:
        return await asyncio.wait_for(operation, timeout=deadline)
    except asyncio.TimeoutError:
        logger.warning('AI analysis timed out after %.1fs; using fallback', deadline)
    except Exception as exc:
        logger.warning('AI analysis failed (%s); using fallback', exc)
    return fallback_enrichment(measurement)
