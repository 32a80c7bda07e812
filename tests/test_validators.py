"""Input validators return one message per violated field."""
from healthtrack.utils.validators import (
    validate_blood_pressure, validate_blood_sugar, validate_blood_sugar_analysis,
    validate_profile_update, validate_question,
)

NOW = '2026-03-01T08:30:00Z'


def test_valid_blood_sugar():
    assert validate_blood_sugar({'value': 120, 'timestamp': NOW, 'notes': 'fasting'}) == []


def test_blood_sugar_range_edges():
    assert validate_blood_sugar({'value': 20, 'timestamp': NOW}) == []
    assert validate_blood_sugar({'value': 600, 'timestamp': NOW}) == []
    assert validate_blood_sugar({'value': 19, 'timestamp': NOW}) == ['Value must be between 20 and 600']
    assert validate_blood_sugar({'value': 700, 'timestamp': NOW}) == ['Value must be between 20 and 600']


def test_blood_sugar_type_errors():
    assert validate_blood_sugar({'value': True, 'timestamp': NOW}) == ['Value must be an integer']
    assert validate_blood_sugar({'value': 99.5, 'timestamp': NOW}) == ['Value must be an integer']
    assert validate_blood_sugar({'value': '100', 'timestamp': NOW}) == ['Value must be an integer']
    assert validate_blood_sugar({'value': float('nan'), 'timestamp': NOW}) == ['Value must be an integer']


def test_blood_sugar_missing_everything():
    assert validate_blood_sugar({}) == ['Value is required', 'Timestamp is required']


def test_bad_timestamp_and_notes():
    errors = validate_blood_sugar({'value': 100, 'timestamp': 'yesterday', 'notes': 'x' * 1001})
    assert errors == [
        'Timestamp must be an ISO-8601 datetime',
        'Notes must be 1000 characters or fewer',
    ]
    assert validate_blood_sugar({'value': 100, 'timestamp': 12345}) == ['Timestamp must be an ISO-8601 datetime']


def test_blood_pressure_ranges():
    assert validate_blood_pressure({'systolic': 70, 'diastolic': 150, 'timestamp': NOW}) == []
    assert validate_blood_pressure({'systolic': 69, 'diastolic': 39, 'timestamp': NOW}) == [
        'Systolic must be between 70 and 250',
        'Diastolic must be between 40 and 150',
    ]


def test_analysis_previous_readings():
    assert validate_blood_sugar_analysis({'value': 100, 'previousReadings': [90, 95.5]}) == []
    assert validate_blood_sugar_analysis({'value': 100, 'previousReadings': 'many'}) == [
        'Previous readings must be a list of numbers',
    ]


def test_question():
    assert validate_question({'question': 'Is 140 high?'}) == []
    assert validate_question({'question': '   '}) == ['Question is required']
    assert validate_question({}) == ['Question is required']
    assert validate_question({'question': 'q' * 501}) == ['Question must be 500 characters or fewer']


def test_profile_update():
    assert validate_profile_update({'name': 'Bob', 'email': 'bob@example.com', 'age': '40'}) == []
    errors = validate_profile_update({
        'name': ' ',
        'email': 'not-an-email',
        'age': 200,
        'height': 'tall',
        'weight': 10,
        'conditions': 'asthma',
    })
    assert errors == [
        'Name cannot be empty',
        'Invalid email format',
        'Age must be between 0 and 130',
        'Height must be an integer',
        'Weight must be between 50 and 700 lbs',
        'Conditions must be a list of strings',
    ]


def test_profile_name_must_be_a_string():
    assert validate_profile_update({'name': 12345}) == ['Name must be a string']


def test_profile_gender():
    assert validate_profile_update({'gender': 'female'}) == []
    assert validate_profile_update({'gender': None}) == []
    assert validate_profile_update({'gender': {'x': 1}}) == ['Gender must be a string']
    assert validate_profile_update({'gender': 'g' * 51}) == ['Gender must be 50 characters or fewer']


def test_profile_numbers_must_be_integral():
    assert validate_profile_update({'age': 30.0, 'height': '65', 'weight': 150}) == []
    assert validate_profile_update({'age': 30.9, 'height': '65.5', 'weight': True}) == [
        'Age must be an integer',
        'Height must be an integer',
        'Weight must be an integer',
    ]
