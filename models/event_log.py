# models/event_log.py

import json

from extensions import db
from sqlalchemy import CheckConstraint
from time_utils import utcnow

from .event import _iso

SEVERITIES = ('info', 'warning', 'critical')


class EventLog(db.Model):
    __tablename__ = 'event_logs'
    id = db.Column(db.Integer, primary_key=True)
    # Plain integers: log rows outlive the events and participants they mention
    event_id = db.Column(db.Integer, nullable=True, index=True)
    participant_id = db.Column(db.Integer, nullable=True)
    action = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    details = db.Column('metadata', db.Text, nullable=True)
    performed_by = db.Column(db.Integer, nullable=True)
    severity = db.Column(db.String(50), nullable=False, default='info')
    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    __table_args__ = (
        CheckConstraint("severity IN ('info', 'warning', 'critical')", name="check_log_severity"),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'event_id': self.event_id,
            'participant_id': self.participant_id,
            'action': self.action,
            'description': self.description,
            'metadata': json.loads(self.details) if self.details else None,
            'performed_by': self.performed_by,
            'severity': self.severity,
            'created_at': _iso(self.created_at),
        }
