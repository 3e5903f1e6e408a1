# models/event.py

from extensions import db
from sqlalchemy import CheckConstraint
from time_utils import utcnow

EVENT_STATUSES = ('draft', 'published', 'ongoing', 'completed', 'cancelled')
EVENT_TYPES = ('classificatoria', 'semi-final', 'final')

# Frozen once the event has left draft; only lifecycle operations move them
CRITICAL_FIELDS = frozenset({
    'type', 'category', 'start_date', 'end_date',
    'registration_start_date', 'registration_end_date',
    'max_participants', 'status',
})
EDITABLE_FIELDS = CRITICAL_FIELDS | {
    'name', 'description', 'location', 'notes', 'rules', 'prizes', 'is_public',
}


class Event(db.Model):
    __tablename__ = 'events'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(100), nullable=False)
    category = db.Column(db.String(100), nullable=False, index=True)
    location = db.Column(db.String(255), nullable=False)
    max_participants = db.Column(db.Integer, nullable=True)
    current_participants = db.Column(db.Integer, nullable=False, default=0)
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=True)
    registration_start_date = db.Column(db.DateTime, nullable=True)
    registration_end_date = db.Column(db.DateTime, nullable=True)
    status = db.Column(db.String(50), nullable=False, default='draft')
    is_public = db.Column(db.Boolean, nullable=False, default=True)
    rules = db.Column(db.Text, nullable=True)
    prizes = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow)

    creator = db.relationship('User')
    registrations = db.relationship('EventRegistration', backref='event', cascade="all, delete-orphan")
    judge_assignments = db.relationship('EventJudge', backref='event', cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'published', 'ongoing', 'completed', 'cancelled')",
            name="check_event_status",
        ),
    )

    @property
    def is_full(self):
        return self.max_participants is not None and self.current_participants >= self.max_participants

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'type': self.type,
            'category': self.category,
            'location': self.location,
            'max_participants': self.max_participants,
            'current_participants': self.current_participants,
            'start_date': _iso(self.start_date),
            'end_date': _iso(self.end_date),
            'registration_start_date': _iso(self.registration_start_date),
            'registration_end_date': _iso(self.registration_end_date),
            'status': self.status,
            'is_public': self.is_public,
            'rules': self.rules,
            'prizes': self.prizes,
            'notes': self.notes,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


def _iso(value):
    return value.isoformat() if value is not None else None
