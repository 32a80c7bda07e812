"""
Input validation for readings, assistant questions and profile updates.
Each validator returns a list of error strings (empty = valid); every message
names the offending field.
"""
import math

from email_validator import validate_email, EmailNotValidError

from healthtrack.utils.formatting import parse_timestamp

BLOOD_SUGAR_RANGE = (20, 600)
SYSTOLIC_RANGE = (70, 250)
DIASTOLIC_RANGE = (40, 150)

MAX_NOTES_LENGTH = 1000
MAX_QUESTION_LENGTH = 500
MAX_PREVIOUS_READINGS = 5
MAX_GENDER_LENGTH = 50

# field, label, bounds, unit suffix for the message
PROFILE_INT_FIELDS = (
    ('age', 'Age', (0, 130), ''),
    ('height', 'Height', (24, 108), ' inches'),
    ('weight', 'Weight', (50, 700), ' lbs'),
)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _profile_int(value):
    """Integer from a JSON number or a digit string (profile forms send strings); None otherwise."""
    if _is_number(value):
        if math.isfinite(value) and value == int(value):
            return int(value)
        return None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _check_int_range(data: dict, field: str, label: str, bounds: tuple, errors: list):
    value = data.get(field)
    if value is None:
        errors.append(f'{label} is required')
        return
    if not _is_number(value) or not math.isfinite(value) or value != int(value):
        errors.append(f'{label} must be an integer')
        return
    low, high = bounds
    if value < low or value > high:
        errors.append(f'{label} must be between {low} and {high}')


def _check_timestamp(data: dict, errors: list):
    timestamp = data.get('timestamp')
    if not timestamp:
        errors.append('Timestamp is required')
        return
    try:
        parse_timestamp(timestamp)
    except (ValueError, AttributeError):
        errors.append('Timestamp must be an ISO-8601 datetime')


def _check_notes(data: dict, errors: list):
    notes = data.get('notes')
    if notes is None:
        return
    if not isinstance(notes, str):
        errors.append('Notes must be a string')
    elif len(notes) > MAX_NOTES_LENGTH:
        errors.append(f'Notes must be {MAX_NOTES_LENGTH} characters or fewer')


def validate_blood_sugar(data: dict) -> list:
    """Validate a blood sugar reading: value (mg/dL), timestamp, optional notes."""
    errors = []
    _check_int_range(data, 'value', 'Value', BLOOD_SUGAR_RANGE, errors)
    _check_timestamp(data, errors)
    _check_notes(data, errors)
    return errors


def validate_blood_pressure(data: dict) -> list:
    """Validate a blood pressure reading: systolic, diastolic, timestamp, optional notes."""
    errors = []
    _check_int_range(data, 'systolic', 'Systolic', SYSTOLIC_RANGE, errors)
    _check_int_range(data, 'diastolic', 'Diastolic', DIASTOLIC_RANGE, errors)
    _check_timestamp(data, errors)
    _check_notes(data, errors)
    return errors


def validate_blood_sugar_analysis(data: dict) -> list:
    """Ad-hoc analysis request: value plus optional previousReadings (list of values)."""
    errors = []
    _check_int_range(data, 'value', 'Value', BLOOD_SUGAR_RANGE, errors)

    previous = data.get('previousReadings')
    if previous is not None:
        if not isinstance(previous, list) or not all(_is_number(v) for v in previous):
            errors.append('Previous readings must be a list of numbers')
    return errors


def validate_blood_pressure_analysis(data: dict) -> list:
    """Ad-hoc analysis request: systolic/diastolic plus optional previousReadings
    (list of {systolic, diastolic} objects)."""
    errors = []
    _check_int_range(data, 'systolic', 'Systolic', SYSTOLIC_RANGE, errors)
    _check_int_range(data, 'diastolic', 'Diastolic', DIASTOLIC_RANGE, errors)

    previous = data.get('previousReadings')
    if previous is not None:
        valid = isinstance(previous, list) and all(
            isinstance(r, dict) and _is_number(r.get('systolic')) and _is_number(r.get('diastolic'))
            for r in previous
        )
        if not valid:
            errors.append('Previous readings must be a list of {systolic, diastolic} objects')
    return errors


def validate_question(data: dict) -> list:
    """Validate a health assistant question."""
    errors = []
    question = data.get('question')
    if not isinstance(question, str) or not question.strip():
        errors.append('Question is required')
    elif len(question) > MAX_QUESTION_LENGTH:
        errors.append(f'Question must be {MAX_QUESTION_LENGTH} characters or fewer')
    return errors


def validate_profile_update(data: dict) -> list:
    """Validate profile update input."""
    errors = []

    name = data.get('name')
    if name is not None:
        if not isinstance(name, str):
            errors.append('Name must be a string')
        elif not name.strip():
            errors.append('Name cannot be empty')
        elif len(name.strip()) > 200:
            errors.append('Name must be 200 characters or fewer')

    email = data.get('email')
    if email is not None and email != '':
        try:
            validate_email(str(email), check_deliverability=False)
        except EmailNotValidError:
            errors.append('Invalid email format')

    gender = data.get('gender')
    if gender is not None:
        if not isinstance(gender, str):
            errors.append('Gender must be a string')
        elif len(gender) > MAX_GENDER_LENGTH:
            errors.append(f'Gender must be {MAX_GENDER_LENGTH} characters or fewer')

    for field, label, (low, high), unit in PROFILE_INT_FIELDS:
        value = data.get(field)
        if value is None or value == '':
            continue
        number = _profile_int(value)
        if number is None:
            errors.append(f'{label} must be an integer')
        elif number < low or number > high:
            errors.append(f'{label} must be between {low} and {high}{unit}')

    for field, label in (('conditions', 'Conditions'), ('medications', 'Medications')):
        items = data.get(field)
        if items is not None:
            if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
                errors.append(f'{label} must be a list of strings')

    return errors
