# models/evaluation.py

from extensions import db
from sqlalchemy import CheckConstraint
from time_utils import utcnow

from .event import _iso

MIN_SCORE = 0
MAX_SCORE = 100


class Evaluation(db.Model):
    __tablename__ = 'evaluations'
    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('events.id', ondelete='CASCADE'), nullable=False, index=True)
    judge_id = db.Column(db.Integer, db.ForeignKey('judges.id', ondelete='CASCADE'), nullable=False)
    participant_id = db.Column(db.Integer, db.ForeignKey('participants.id', ondelete='CASCADE'), nullable=False)
    session_id = db.Column(db.Integer, db.ForeignKey('evaluation_sessions.id', ondelete='SET NULL'), nullable=True)
    score = db.Column(db.Integer, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    is_published = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow)

    judge = db.relationship('Judge')
    participant = db.relationship('Participant')

    # No unique (event, judge, participant): repeated submissions are kept as rows
    __table_args__ = (
        CheckConstraint("score >= 0", name="check_score"),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'event_id': self.event_id,
            'judge_id': self.judge_id,
            'participant_id': self.participant_id,
            'session_id': self.session_id,
            'score': self.score,
            'notes': self.notes,
            'is_published': self.is_published,
            'created_at': _iso(self.created_at),
        }
