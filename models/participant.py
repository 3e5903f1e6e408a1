# models/participant.py

from extensions import db
from sqlalchemy import CheckConstraint
from time_utils import utcnow

from .event import _iso


class Participant(db.Model):
    __tablename__ = 'participants'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    stage_name = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    phone = db.Column(db.String(50), nullable=True)
    age = db.Column(db.Integer, nullable=True)
    category = db.Column(db.String(100), nullable=False)
    experience = db.Column(db.String(100), nullable=False)
    additional_info = db.Column(db.Text, nullable=True)
    has_special_needs = db.Column(db.Boolean, nullable=False, default=False)
    special_needs_description = db.Column(db.Text, nullable=True)
    accepts_email_notifications = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.String(50), nullable=False, default='pending')
    rejection_reason = db.Column(db.Text, nullable=True)
    archived = db.Column(db.Boolean, nullable=False, default=False)
    registration_date = db.Column(db.DateTime, default=utcnow)
    approved_at = db.Column(db.DateTime, nullable=True)
    approved_by = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    rejected_at = db.Column(db.DateTime, nullable=True)
    rejected_by = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow)

    registrations = db.relationship('EventRegistration', backref='participant', cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="check_participant_status"),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'stage_name': self.stage_name,
            'email': self.email,
            'phone': self.phone,
            'age': self.age,
            'category': self.category,
            'experience': self.experience,
            'additional_info': self.additional_info,
            'has_special_needs': self.has_special_needs,
            'special_needs_description': self.special_needs_description,
            'accepts_email_notifications': self.accepts_email_notifications,
            'status': self.status,
            'rejection_reason': self.rejection_reason,
            'archived': self.archived,
            'registration_date': _iso(self.registration_date),
            'approved_at': _iso(self.approved_at),
            'rejected_at': _iso(self.rejected_at),
            'notes': self.notes,
        }
