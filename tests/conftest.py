"""
Shared fixtures: an app on in-memory SQLite with one seeded user.
"""
import base64
import os
from datetime import datetime
from unittest.mock import AsyncMock

import pytest

os.environ['SECRET_KEY'] = 'test-secret-key'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret'
os.environ['PHI_ENCRYPTION_KEY'] = base64.b64encode(b'k' * 32).decode()
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['OPENAI_API_KEY'] = ''
os.environ.pop('FLASK_ENV', None)

from healthtrack import create_app, db  # noqa: E402
from healthtrack.models import User  # noqa: E402
from healthtrack.services.enrichment import EnrichmentResult  # noqa: E402
from healthtrack.utils.auth import generate_token  # noqa: E402


@pytest.fixture(scope='session')
def audit_log_file(tmp_path_factory):
    return str(tmp_path_factory.mktemp('logs') / 'audit.log')


@pytest.fixture
def app(audit_log_file):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'AUDIT_LOG_FILE': audit_log_file,
        'OPENAI_API_KEY': '',
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    user = User(username='alice', age=52, gender='female', height=64, weight=160)
    user.name = 'Alice Example'
    user.email = 'alice@example.com'
    user.condition_list = ['Type 2 diabetes']
    user.medications = ['Metformin']
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def auth_headers(user):
    return {'Authorization': f'Bearer {generate_token(user.id)}'}


@pytest.fixture
def now_iso():
    return datetime.utcnow().replace(microsecond=0).isoformat() + 'Z'


@pytest.fixture
def analyst():
    """Stand-in for AnalysisClient with a canned AI result."""
    fake = AsyncMock()
    fake.enrich.return_value = EnrichmentResult(
        status='Normal', suggestion='Keep up the good work.', risk_level=12,
    )
    fake.complete.return_value = 'Drink water and stay active.'
    return fake


class FakeStorage:
    """In-memory storage collaborator for pipeline tests."""

    def __init__(self, recent=None, fail_on_create=None):
        self.recent = list(recent or [])
        self.created = []
        self.fail_on_create = fail_on_create
        self.recent_calls = []

    def get_recent_readings(self, user_id, kind, limit, offset=0):
        self.recent_calls.append((user_id, kind, limit))
        return self.recent[:limit]

    def create_reading(self, kind, payload):
        if self.fail_on_create is not None:
            raise self.fail_on_create
        record = _Record(id=len(self.created) + 1, created_at=datetime.utcnow(), **payload)
        self.created.append((kind, payload))
        return record

    def get_user(self, user_id):
        return None


class _Record:
    def __init__(self, **fields):
        self.__dict__.update(fields)


@pytest.fixture
def storage_factory():
    return FakeStorage
