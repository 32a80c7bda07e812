"""
User model with encrypted PHI fields.
"""
import json
import logging
from datetime import datetime
from healthtrack import db
from healthtrack.utils.encryption import encrypt_phi, decrypt_phi, hash_email

logger = logging.getLogger(__name__)


class User(db.Model):
    """
    User model storing profile information.
    PHI fields (name, email, medications) are encrypted at rest.
    """
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), nullable=False, unique=True)

    # Encrypted PHI fields (stored as encrypted base64 strings)
    _name_encrypted = db.Column('name', db.Text, nullable=True)
    _email_encrypted = db.Column('email', db.Text, nullable=True)
    _email_hash = db.Column('email_hash', db.String(64), nullable=True, index=True)
    _medications_encrypted = db.Column('medications', db.Text, nullable=True)  # JSON array

    # Non-PHI profile fields
    age = db.Column(db.Integer, nullable=True)
    gender = db.Column(db.String(50), nullable=True)
    height = db.Column(db.Integer, nullable=True)
    weight = db.Column(db.Integer, nullable=True)
    conditions = db.Column(db.Text, nullable=True)  # JSON array

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    blood_sugar_readings = db.relationship('BloodSugarReading', backref='user', lazy='dynamic',
                                           order_by='BloodSugarReading.timestamp.desc()')
    blood_pressure_readings = db.relationship('BloodPressureReading', backref='user', lazy='dynamic',
                                              order_by='BloodPressureReading.timestamp.desc()')

    # PHI property: name
    @property
    def name(self) -> str:
        return decrypt_phi(self._name_encrypted) if self._name_encrypted else None

    @name.setter
    def name(self, value: str):
        self._name_encrypted = encrypt_phi(value) if value else None

    # PHI property: email
    @property
    def email(self) -> str:
        return decrypt_phi(self._email_encrypted) if self._email_encrypted else None

    @email.setter
    def email(self, value: str):
        self._email_encrypted = encrypt_phi(value) if value else None
        self._email_hash = hash_email(value) if value else None

    # PHI property: medications (list of strings)
    @property
    def medications(self) -> list:
        if not self._medications_encrypted:
            return []
        return json.loads(decrypt_phi(self._medications_encrypted))

    @medications.setter
    def medications(self, value: list):
        self._medications_encrypted = encrypt_phi(json.dumps(value)) if value else None

    @property
    def condition_list(self) -> list:
        if not self.conditions:
            return []
        try:
            return json.loads(self.conditions)
        except ValueError:
            return []

    @condition_list.setter
    def condition_list(self, value: list):
        self.conditions = json.dumps(value) if value else None

    def to_profile_dict(self):
        """Profile view. Numeric fields are rendered as strings for the client forms.
        Wraps PHI decryption in try/except so one bad field doesn't break the profile."""
        data = {
            'id': self.id,
            'age': str(self.age) if self.age is not None else None,
            'gender': self.gender,
            'height': str(self.height) if self.height is not None else None,
            'weight': str(self.weight) if self.weight is not None else None,
            'conditions': self.condition_list,
        }
        defaults = {'name': None, 'email': None, 'medications': []}
        for key, default in defaults.items():
            try:
                data[key] = getattr(self, key)
            except Exception:
                logger.error(
                    'Decryption error for user_id=%s field=%s', self.id, key,
                    exc_info=True,
                )
                data[key] = default
        return data

    @staticmethod
    def find_by_email(email: str):
        """Find a user by email using deterministic HMAC hash for lookup."""
        email_hash = hash_email(email)
        return User.query.filter_by(_email_hash=email_hash).first()

    def __repr__(self):
        return f'<User {self.id}>'
