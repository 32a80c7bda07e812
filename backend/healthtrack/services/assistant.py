"""
Free-text health assistant.
"""
import asyncio
import logging

from healthtrack.errors import EnrichmentError
from healthtrack.services.guard import DEFAULT_DEADLINE_SECONDS

logger = logging.getLogger(__name__)

ASSISTANT_TEMPERATURE = 0.5
ASSISTANT_MAX_TOKENS = 250

ERROR_REPLY = (
    "I apologize, but I'm having trouble processing your request at the moment. "
    "Please try again later."
)
TIMEOUT_REPLY = (
    "I'm sorry, but it's taking me longer than expected to process your request. "
    "Please try asking again or simplify your question."
)
EMPTY_REPLY = "I'm sorry, I couldn't process your request at the moment."

ASSISTANT_PROMPT = """
You are a helpful health AI assistant. Provide a concise, informative response to the user's health-related question.
The response should be professional but friendly, and limited to 3-4 sentences in most cases.
If you don't know the answer to a specific medical question, acknowledge that and recommend consulting a healthcare professional.
Do not include any disclaimers about not being a doctor in your response.

User's question: {question}
"""


async def answer_question(analyst, question: str) -> str:
    try:
        reply = await analyst.complete(
            ASSISTANT_PROMPT.format(question=question),
            temperature=ASSISTANT_TEMPERATURE,
            max_tokens=ASSISTANT_MAX_TOKENS,
        )
    except EnrichmentError as exc:
        logger.warning('Assistant request failed: %s', exc)
        return ERROR_REPLY
    return reply.strip() or EMPTY_REPLY


async def ask(analyst, question: str, deadline: float = DEFAULT_DEADLINE_SECONDS) -> str:
    """Answer within `deadline` seconds or return the timeout reply."""
    try:
        return await asyncio.wait_for(answer_question(analyst, question), timeout=deadline)
    except asyncio.TimeoutError:
        logger.warning('Assistant response timed out after %.1fs', deadline)
        return TIMEOUT_REPLY
