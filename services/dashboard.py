# services/dashboard.py

import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from errors import DataAccessError, Result
from extensions import db
from models import Evaluation, Event, Judge, Participant
from models.event import EVENT_STATUSES

logger = logging.getLogger(__name__)


def _count_by(column):
    return dict(db.session.query(column, func.count()).group_by(column).all())


def get_dashboard_stats():
    """Counts shown on the admin dashboard."""
    try:
        events_by_status = _count_by(Event.status)
        participants_by_status = _count_by(Participant.status)
        active_judges = Judge.query.filter_by(is_active=True).count()
        total_evaluations = Evaluation.query.count()
    except SQLAlchemyError:
        logger.exception("Failed to load dashboard stats")
        return Result.fail(DataAccessError('Could not load dashboard stats'))

    return Result.ok({
        'events': {status: events_by_status.get(status, 0) for status in EVENT_STATUSES},
        'participants': {
            status: participants_by_status.get(status, 0)
            for status in ('pending', 'approved', 'rejected')
        },
        'active_judges': active_judges,
        'total_evaluations': total_evaluations,
    })
