"""
Seed script: demo user with connected devices and a few readings.
Run from backend/: python seed.py
"""
import sys
import os
from datetime import datetime, timedelta
sys.path.insert(0, os.path.dirname(__file__))

from healthtrack import create_app, db
from healthtrack.models import BloodPressureReading, BloodSugarReading, Device, User
from healthtrack.services.classifier import (
    BloodPressure, BloodSugar, classify_blood_pressure, classify_blood_sugar,
)
from healthtrack.services.guard import fallback_enrichment
from healthtrack.utils.auth import generate_token

DEMO_USERNAME = 'demo'
DEMO_EMAIL = 'demo@healthtrack.local'

DEVICES = [
    ('Accu-Chek Guide', 'glucometer'),
    ('Omron Evolv', 'bp_monitor'),
]

SUGAR_VALUES = [92, 118, 141, 104]
PRESSURE_VALUES = [(118, 76), (126, 79), (134, 86)]


def seed():
    app = create_app()
    with app.app_context():
        db.create_all()

        user = User.query.filter_by(username=DEMO_USERNAME).first()
        if user:
            print(f"  Demo user already exists (id={user.id}), skipping readings.")
        else:
            user = User(username=DEMO_USERNAME, age=45, gender='female', height=65, weight=150)
            user.name = 'Demo User'
            user.email = DEMO_EMAIL
            user.condition_list = ['Prediabetes']
            user.medications = ['Metformin 500mg']
            db.session.add(user)
            db.session.flush()

            now = datetime.utcnow()
            for name, device_type in DEVICES:
                db.session.add(Device(user_id=user.id, name=name, type=device_type,
                                      last_sync=now - timedelta(hours=2), status='connected'))

            for days_ago, value in enumerate(reversed(SUGAR_VALUES)):
                db.session.add(BloodSugarReading(
                    user_id=user.id, value=value, timestamp=now - timedelta(days=days_ago),
                    status=classify_blood_sugar(value).status,
                    ai_analysis=fallback_enrichment(BloodSugar(value)).to_dict(),
                ))
            for days_ago, (systolic, diastolic) in enumerate(reversed(PRESSURE_VALUES)):
                db.session.add(BloodPressureReading(
                    user_id=user.id, systolic=systolic, diastolic=diastolic,
                    timestamp=now - timedelta(days=days_ago, hours=1),
                    status=classify_blood_pressure(systolic, diastolic).status,
                    ai_analysis=fallback_enrichment(BloodPressure(systolic, diastolic)).to_dict(),
                ))

            db.session.commit()
            print(f"  Created demo user (id={user.id}) with {len(DEVICES)} devices")

        print(f"\nBearer token for {DEMO_USERNAME}:\n{generate_token(user.id)}")
        print("\nDone.")


if __name__ == "__main__":
    seed()
