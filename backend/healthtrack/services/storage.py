"""
Database access for readings, users, devices and assistant history.

Every public method turns SQLAlchemy failures into StorageError after rolling
back the session. Nothing here retries.
"""
import logging
from datetime import datetime
from functools import wraps

from sqlalchemy.exc import SQLAlchemyError

from healthtrack import db
from healthtrack.errors import StorageError
from healthtrack.models import AIChatHistory, BloodPressureReading, BloodSugarReading, Device, User
from healthtrack.services.classifier import BLOOD_PRESSURE, BLOOD_SUGAR

logger = logging.getLogger(__name__)

READING_MODELS = {
    BLOOD_SUGAR: BloodSugarReading,
    BLOOD_PRESSURE: BloodPressureReading,
}


def _storage_call(f):
    """Decorator: roll back and raise StorageError on any database error."""
    @wraps(f)
    def wrapper(self, *args, **kwargs):
        try:
            return f(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error('Storage operation %s failed: %s', f.__name__, exc)
            raise StorageError(f'Database error during {f.__name__}') from exc
    return wrapper


class ReadingStorage:
    """Storage collaborator used by the ingestion pipeline and the read endpoints."""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    @staticmethod
    def model_for(kind):
        try:
            return READING_MODELS[kind]
        except KeyError:
            raise ValueError(f'Unknown reading kind: {kind}') from None

    @_storage_call
    def get_user(self, user_id):
        return self.session.get(User, user_id)

    @_storage_call
    def get_recent_readings(self, user_id, kind, limit, offset=0):
        """Most recent readings of one kind, newest first."""
        model = self.model_for(kind)
        return (self.session.query(model)
                .filter(model.user_id == user_id)
                .order_by(model.timestamp.desc(), model.id.desc())
                .offset(offset)
                .limit(limit)
                .all())

    @_storage_call
    def get_latest_reading(self, user_id, kind):
        model = self.model_for(kind)
        return (self.session.query(model)
                .filter(model.user_id == user_id)
                .order_by(model.timestamp.desc(), model.id.desc())
                .first())

    @_storage_call
    def get_readings_since(self, user_id, kind, cutoff: datetime = None, limit=100):
        """Readings of one kind within a chart window, oldest first."""
        model = self.model_for(kind)
        query = self.session.query(model).filter(model.user_id == user_id)
        if cutoff is not None:
            query = query.filter(model.timestamp >= cutoff)
        recent = query.order_by(model.timestamp.desc(), model.id.desc()).limit(limit).all()
        return list(reversed(recent))

    @_storage_call
    def get_reading(self, kind, reading_id):
        return self.session.get(self.model_for(kind), reading_id)

    @_storage_call
    def create_reading(self, kind, payload: dict):
        """Insert a reading and return it with its assigned id and created_at."""
        reading = self.model_for(kind)(**payload)
        self.session.add(reading)
        self.session.commit()
        return reading

    @_storage_call
    def get_devices(self, user_id):
        return (self.session.query(Device)
                .filter(Device.user_id == user_id)
                .order_by(Device.id)
                .all())

    @_storage_call
    def create_chat_history(self, user_id, message, response, category='general'):
        entry = AIChatHistory(
            user_id=user_id,
            message=message,
            response=response,
            timestamp=datetime.utcnow(),
            category=category,
        )
        self.session.add(entry)
        self.session.commit()
        return entry

    @_storage_call
    def save_user(self, user):
        self.session.add(user)
        self.session.commit()
        return user
