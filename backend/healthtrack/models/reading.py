"""
Blood sugar and blood pressure reading models.
"""
from datetime import datetime
from healthtrack import db
from healthtrack.utils.formatting import to_iso


class BloodSugarReading(db.Model):
    """
    Blood sugar reading (mg/dL).
    `status` is the classifier label at ingestion time; `ai_analysis` holds the
    enrichment payload ({status, suggestion, riskLevel}), AI-derived or fallback.
    """
    __tablename__ = 'blood_sugar_readings'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    value = db.Column(db.Integer, nullable=False)

    # Measurement time (naive UTC)
    timestamp = db.Column(db.DateTime, nullable=False, index=True)
    notes = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(50), nullable=True)
    ai_analysis = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'value': self.value,
            'timestamp': to_iso(self.timestamp),
            'notes': self.notes,
            'status': self.status,
            'aiAnalysis': self.ai_analysis,
            'created_at': to_iso(self.created_at),
        }

    def __repr__(self):
        return f'<BloodSugarReading {self.id}: {self.value}>'


class BloodPressureReading(db.Model):
    """
    Blood pressure reading (mmHg). Same status/analysis semantics as BloodSugarReading.
    """
    __tablename__ = 'blood_pressure_readings'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    # Blood pressure values
    systolic = db.Column(db.Integer, nullable=False)
    diastolic = db.Column(db.Integer, nullable=False)

    timestamp = db.Column(db.DateTime, nullable=False, index=True)
    notes = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(50), nullable=True)
    ai_analysis = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'systolic': self.systolic,
            'diastolic': self.diastolic,
            'timestamp': to_iso(self.timestamp),
            'notes': self.notes,
            'status': self.status,
            'aiAnalysis': self.ai_analysis,
            'created_at': to_iso(self.created_at),
        }

    def __repr__(self):
        return f'<BloodPressureReading {self.id}: {self.systolic}/{self.diastolic}>'
