"""Reading routes: ingestion, charts, dashboard summary, recent list and history."""
import math
from datetime import datetime
from flask import current_app, g, jsonify, request

from healthtrack.services.classifier import (
    BLOOD_PRESSURE, BLOOD_SUGAR, classify_blood_pressure, classify_blood_sugar,
)
from healthtrack.services.enrichment import AnalysisClient
from healthtrack.services.ingestion import ingest
from healthtrack.services.storage import ReadingStorage
from healthtrack.utils.audit_logger import audit_log, audit_phi_access
from healthtrack.utils.auth import token_required
from healthtrack.utils.formatting import format_timestamp, period_cutoff, to_iso
from . import api_bp, json_body, within_request_deadline

HISTORY_FETCH_LIMIT = 100
MAX_PAGE_SIZE = 100

READING_LABELS = {
    BLOOD_SUGAR: 'Blood Sugar',
    BLOOD_PRESSURE: 'Blood Pressure',
}


def _status_of(kind, reading):
    """Stored status wins; statusType is always recomputed from the values."""
    if kind == BLOOD_SUGAR:
        computed = classify_blood_sugar(reading.value)
    else:
        computed = classify_blood_pressure(reading.systolic, reading.diastolic)
    return reading.status or computed.status, computed.status_type


def _display_value(kind, reading, with_unit=True):
    if kind == BLOOD_SUGAR:
        return f'{reading.value} mg/dL' if with_unit else reading.value
    value = f'{reading.systolic}/{reading.diastolic}'
    return f'{value} mmHg' if with_unit else value


def _list_item(kind, reading, now):
    status, status_type = _status_of(kind, reading)
    return {
        'id': reading.id,
        'type': READING_LABELS[kind],
        'value': _display_value(kind, reading),
        'time': format_timestamp(reading.timestamp, now=now),
        'timestamp': to_iso(reading.timestamp),
        'notes': reading.notes,
        'status': status,
        'statusType': status_type,
    }


def _merged_newest_first(storage, kinds, limit):
    """(kind, reading) pairs across kinds, newest first."""
    pairs = [
        (kind, reading)
        for kind in kinds
        for reading in storage.get_recent_readings(g.user_id, kind, limit)
    ]
    pairs.sort(key=lambda p: p[1].timestamp, reverse=True)
    return pairs


async def _create_reading(kind):
    data = json_body()
    if data is None:
        return jsonify({'message': 'Request body must be a JSON object'}), 400

    config = current_app.config
    async with AnalysisClient.from_config(config) as analyst:
        stored = await within_request_deadline(ingest(
            kind, data, g.user_id, ReadingStorage(), analyst,
            deadline=config['AI_ANALYSIS_TIMEOUT_SECONDS'],
        ))

    audit_log('CREATE', f'{kind}_reading', resource_id=str(stored.id),
              details={'status': stored.status.status})
    return jsonify(stored.to_dict()), 201


@api_bp.route('/readings/blood-sugar', methods=['POST'])
@token_required
async def create_blood_sugar_reading():
    """Log a blood sugar reading with classification and AI analysis."""
    return await _create_reading(BLOOD_SUGAR)


@api_bp.route('/readings/blood-pressure', methods=['POST'])
@token_required
async def create_blood_pressure_reading():
    """Log a blood pressure reading with classification and AI analysis."""
    return await _create_reading(BLOOD_PRESSURE)


def _chart_readings(kind):
    period = request.args.get('period', 'week')
    cutoff = period_cutoff(period)
    return ReadingStorage().get_readings_since(g.user_id, kind, cutoff, limit=HISTORY_FETCH_LIMIT)


@api_bp.route('/readings/blood-sugar', methods=['GET'])
@token_required
@audit_phi_access('READ', 'blood_sugar_reading')
def blood_sugar_chart():
    """Chart points for the requested period (week, month, year)."""
    return jsonify([
        {
            'day': r.timestamp.strftime('%a'),
            'value': r.value,
            'timestamp': to_iso(r.timestamp),
        }
        for r in _chart_readings(BLOOD_SUGAR)
    ]), 200


@api_bp.route('/readings/blood-pressure', methods=['GET'])
@token_required
@audit_phi_access('READ', 'blood_pressure_reading')
def blood_pressure_chart():
    return jsonify([
        {
            'day': r.timestamp.strftime('%a'),
            'systolic': r.systolic,
            'diastolic': r.diastolic,
            'timestamp': to_iso(r.timestamp),
        }
        for r in _chart_readings(BLOOD_PRESSURE)
    ]), 200


@api_bp.route('/readings/summary', methods=['GET'])
@token_required
@audit_phi_access('READ', 'reading_summary')
def readings_summary():
    """Latest reading of each kind for the dashboard cards."""
    storage = ReadingStorage()
    now = datetime.utcnow()

    summary = {}
    for kind, key in ((BLOOD_SUGAR, 'bloodSugar'), (BLOOD_PRESSURE, 'bloodPressure')):
        latest = storage.get_latest_reading(g.user_id, kind)
        if latest is None:
            summary[key] = None
            continue
        status, status_type = _status_of(kind, latest)
        summary[key] = {
            'latest': {
                'value': _display_value(kind, latest, with_unit=False),
                'time': format_timestamp(latest.timestamp, now=now),
            },
            'status': status,
            'statusType': status_type,
        }

    return jsonify(summary), 200


@api_bp.route('/readings/recent', methods=['GET'])
@token_required
@audit_phi_access('READ', 'reading')
def recent_readings():
    """Newest readings of both kinds, merged."""
    limit = max(1, min(request.args.get('limit', 4, type=int), MAX_PAGE_SIZE))
    storage = ReadingStorage()
    now = datetime.utcnow()

    readings = _merged_newest_first(storage, (BLOOD_SUGAR, BLOOD_PRESSURE), limit)
    items = []
    for kind, reading in readings[:limit]:
        item = _list_item(kind, reading, now)
        del item['notes']
        items.append(item)
    return jsonify(items), 200


@api_bp.route('/readings/history', methods=['GET'])
@token_required
@audit_phi_access('READ', 'reading')
def reading_history():
    """Paginated history, newest first. type: all, blood_sugar or blood_pressure."""
    page = max(request.args.get('page', 1, type=int), 1)
    page_size = max(1, min(request.args.get('pageSize', 10, type=int), MAX_PAGE_SIZE))
    reading_type = request.args.get('type', 'all') or 'all'

    if reading_type == 'all':
        kinds = (BLOOD_SUGAR, BLOOD_PRESSURE)
    elif reading_type in (BLOOD_SUGAR, BLOOD_PRESSURE):
        kinds = (reading_type,)
    else:
        return jsonify({'message': 'type must be all, blood_sugar or blood_pressure'}), 400

    storage = ReadingStorage()
    now = datetime.utcnow()
    items = []
    for kind, reading in _merged_newest_first(storage, kinds, HISTORY_FETCH_LIMIT):
        item = _list_item(kind, reading, now)
        del item['time']
        items.append(item)

    offset = (page - 1) * page_size
    return jsonify({
        'readings': items[offset:offset + page_size],
        'pagination': {
            'total': len(items),
            'pages': math.ceil(len(items) / page_size),
            'currentPage': page,
            'pageSize': page_size,
        },
    }), 200
