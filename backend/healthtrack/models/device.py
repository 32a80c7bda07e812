"""
Connected device model (glucometers, blood pressure cuffs).
"""
from datetime import datetime
from healthtrack import db
from healthtrack.utils.formatting import format_timestamp


class Device(db.Model):
    __tablename__ = 'devices'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    name = db.Column(db.String(100), nullable=False)
    # glucometer, bp_monitor, ...
    type = db.Column(db.String(50), nullable=False)

    last_sync = db.Column(db.DateTime, nullable=True)
    status = db.Column(db.String(30), nullable=True)
    connection_details = db.Column(db.JSON, nullable=True)

    # Relationships
    user = db.relationship('User', backref='devices')

    @property
    def icon(self):
        return 'device_thermostat' if self.type == 'glucometer' else 'favorite_border'

    def to_dict(self, now=None):
        """Client view. Connection details are never exposed."""
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'icon': self.icon,
            'lastSync': format_timestamp(self.last_sync or now or datetime.utcnow(), now=now),
            'status': self.status or 'connected',
        }

    def __repr__(self):
        return f'<Device {self.id} user={self.user_id} type={self.type}>'
