# models/user.py

from extensions import db
from sqlalchemy import CheckConstraint

ROLES = ('admin', 'operator')


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(32), unique=True, nullable=False)
    nickname = db.Column(db.String(100), nullable=True, index=True)
    email = db.Column(db.String(255), nullable=True)
    role = db.Column(db.String(20), nullable=False, default='operator')
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'operator')", name="check_role"),
    )

    @property
    def is_admin(self):
        return self.role == 'admin'

    def to_dict(self):
        return {'id': self.id, 'nickname': self.nickname, 'role': self.role}
