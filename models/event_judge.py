# models/event_judge.py

from extensions import db
from time_utils import utcnow


class EventJudge(db.Model):
    __tablename__ = 'event_judges'
    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('events.id', ondelete='CASCADE'), nullable=False)
    judge_id = db.Column(db.Integer, db.ForeignKey('judges.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint('event_id', 'judge_id', name='unique_event_judge'),
    )

    def to_dict(self):
        return {'id': self.id, 'event_id': self.event_id, 'judge_id': self.judge_id}
