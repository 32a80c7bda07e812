"""Assistant and ad-hoc analysis routes."""
import logging
import time
from datetime import datetime
from flask import current_app, g, jsonify

from healthtrack.errors import ValidationError
from healthtrack.services.assistant import ask
from healthtrack.services.classifier import BLOOD_PRESSURE, BLOOD_SUGAR
from healthtrack.services.enrichment import AnalysisClient
from healthtrack.services.ingestion import analyze
from healthtrack.services.storage import ReadingStorage
from healthtrack.utils.audit_logger import audit_log
from healthtrack.utils.auth import token_required
from healthtrack.utils.validators import validate_question
from . import api_bp, json_body, within_request_deadline

logger = logging.getLogger(__name__)


@api_bp.route('/ai/ask', methods=['POST'])
@token_required
async def ask_assistant():
    """Answer a health question and keep the exchange in chat history."""
    data = json_body()
    if data is None:
        return jsonify({'message': 'Request body must be a JSON object'}), 400

    errors = validate_question(data)
    if errors:
        raise ValidationError(errors)
    question = data['question'].strip()

    config = current_app.config
    start = time.monotonic()
    async with AnalysisClient.from_config(config) as analyst:
        reply = await within_request_deadline(
            ask(analyst, question, deadline=config['AI_ANALYSIS_TIMEOUT_SECONDS'])
        )
    logger.info('AI response time: %.0fms', (time.monotonic() - start) * 1000)

    entry = ReadingStorage().create_chat_history(g.user_id, question, reply, category='general')
    audit_log('CREATE', 'ai_chat_history', resource_id=str(entry.id))

    return jsonify({
        'message': reply,
        'timestamp': datetime.now().strftime('%H:%M'),
    }), 200


async def _analyze(kind):
    data = json_body()
    if data is None:
        return jsonify({'message': 'Request body must be a JSON object'}), 400

    config = current_app.config
    start = time.monotonic()
    async with AnalysisClient.from_config(config) as analyst:
        result = await within_request_deadline(
            analyze(kind, data, analyst, deadline=config['AI_ANALYSIS_TIMEOUT_SECONDS'])
        )
    logger.info('%s analysis time: %.0fms', kind, (time.monotonic() - start) * 1000)

    audit_log('ANALYZE', f'{kind}_reading', details={'status': result.status})
    return jsonify(result.to_dict()), 200


@api_bp.route('/ai/analyze-blood-sugar', methods=['POST'])
@token_required
async def analyze_blood_sugar():
    """Analyze a blood sugar value without storing it."""
    return await _analyze(BLOOD_SUGAR)


@api_bp.route('/ai/analyze-blood-pressure', methods=['POST'])
@token_required
async def analyze_blood_pressure():
    """Analyze a blood pressure pair without storing it."""
    return await _analyze(BLOOD_PRESSURE)
