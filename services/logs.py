# services/logs.py
# Read side of the audit trail written by hooks.audit()

import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from errors import DataAccessError, Result
from extensions import db
from hooks import audit
from models import EventLog
from models.event_log import SEVERITIES

logger = logging.getLogger(__name__)


def create_event_log(action, event_id=None, participant_id=None, user=None,
                     description=None, severity='info', **details):
    if severity not in SEVERITIES:
        severity = 'info'
    log = audit(action, event_id=event_id, participant_id=participant_id, user=user,
                description=description, severity=severity, **details)
    if log is None:
        return Result.fail(DataAccessError('Could not write event log'))
    return Result.ok(log)


def list_event_logs(event_id=None, severity=None, limit=100):
    query = EventLog.query
    if event_id is not None:
        query = query.filter_by(event_id=event_id)
    if severity is not None:
        query = query.filter_by(severity=severity)
    try:
        logs = query.order_by(EventLog.created_at.desc(), EventLog.id.desc()).limit(limit).all()
    except SQLAlchemyError:
        logger.exception("Failed to load event logs")
        return Result.fail(DataAccessError('Could not load event logs'))
    return Result.ok(logs)


def get_log_stats():
    try:
        counts = dict(
            db.session.query(EventLog.severity, func.count(EventLog.id))
            .group_by(EventLog.severity)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to load log stats")
        return Result.fail(DataAccessError('Could not load log stats'))
    stats = {severity: counts.get(severity, 0) for severity in SEVERITIES}
    stats['total'] = sum(stats.values())
    return Result.ok(stats)
