# models/evaluation_session.py

from extensions import db
from time_utils import utcnow

from .event import _iso


class EvaluationSession(db.Model):
    __tablename__ = 'evaluation_sessions'
    id = db.Column(db.Integer, primary_key=True)
    judge_id = db.Column(db.Integer, db.ForeignKey('judges.id', ondelete='CASCADE'), nullable=False, index=True)
    event_id = db.Column(db.Integer, db.ForeignKey('events.id', ondelete='CASCADE'), nullable=False)
    session_name = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    started_at = db.Column(db.DateTime, default=utcnow)
    ended_at = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'judge_id': self.judge_id,
            'event_id': self.event_id,
            'session_name': self.session_name,
            'is_active': self.is_active,
            'started_at': _iso(self.started_at),
            'ended_at': _iso(self.ended_at),
        }
