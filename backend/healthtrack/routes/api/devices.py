"""Connected device routes."""
from datetime import datetime
from flask import g, jsonify

from healthtrack.services.storage import ReadingStorage
from healthtrack.utils.audit_logger import audit_phi_access
from healthtrack.utils.auth import token_required
from . import api_bp


@api_bp.route('/devices', methods=['GET'])
@token_required
@audit_phi_access('READ', 'device')
def list_devices():
    """Devices connected to the authenticated user's account."""
    now = datetime.utcnow()
    devices = ReadingStorage().get_devices(g.user_id)
    return jsonify([d.to_dict(now=now) for d in devices]), 200
