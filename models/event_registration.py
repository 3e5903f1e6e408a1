# models/event_registration.py

from extensions import db
from time_utils import utcnow

from .event import _iso


class EventRegistration(db.Model):
    __tablename__ = 'event_registrations'
    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('events.id', ondelete='CASCADE'), nullable=False)
    participant_id = db.Column(db.Integer, db.ForeignKey('participants.id', ondelete='CASCADE'), nullable=False)
    status = db.Column(db.String(50), nullable=False, default='registered')
    registered_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint('event_id', 'participant_id', name='unique_event_participant'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'event_id': self.event_id,
            'participant_id': self.participant_id,
            'status': self.status,
            'registered_at': _iso(self.registered_at),
        }
