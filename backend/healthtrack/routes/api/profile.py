"""Profile routes."""
from flask import g, jsonify

from healthtrack.errors import ValidationError
from healthtrack.models.user import User
from healthtrack.services.storage import ReadingStorage
from healthtrack.utils.audit_logger import audit_log, audit_phi_access
from healthtrack.utils.auth import token_required
from healthtrack.utils.validators import validate_profile_update
from . import api_bp, json_body

INTEGER_FIELDS = ('age', 'height', 'weight')


@api_bp.route('/profile', methods=['GET'])
@token_required
@audit_phi_access('READ', 'profile')
def get_profile():
    """Return the authenticated user's profile."""
    user = ReadingStorage().get_user(g.user_id)
    if not user:
        return jsonify({'message': 'User not found'}), 404

    return jsonify(user.to_profile_dict()), 200


@api_bp.route('/profile', methods=['PATCH'])
@token_required
def update_profile():
    """Partial profile update. Fields that are absent keep their current value."""
    data = json_body()
    if data is None:
        return jsonify({'message': 'Request body must be a JSON object'}), 400

    errors = validate_profile_update(data)
    if errors:
        raise ValidationError(errors)

    storage = ReadingStorage()
    user = storage.get_user(g.user_id)
    if not user:
        return jsonify({'message': 'User not found'}), 404

    changed = []

    if data.get('name'):
        user.name = data['name'].strip()
        changed.append('name')

    if data.get('email'):
        email = data['email'].strip().lower()
        owner = User.find_by_email(email)
        if owner is not None and owner.id != user.id:
            return jsonify({'message': 'A user with this email already exists'}), 409
        user.email = email
        changed.append('email')

    if 'gender' in data:
        user.gender = data['gender'] or None
        changed.append('gender')

    for field in INTEGER_FIELDS:
        if data.get(field) not in (None, ''):
            setattr(user, field, int(data[field]))
            changed.append(field)

    if data.get('conditions') is not None:
        user.condition_list = data['conditions']
        changed.append('conditions')

    if data.get('medications') is not None:
        user.medications = data['medications']
        changed.append('medications')

    storage.save_user(user)

    audit_log('UPDATE', 'profile', resource_id=str(user.id),
              details={'action': 'profile_update', 'fields_changed': changed})

    return jsonify(user.to_profile_dict()), 200
