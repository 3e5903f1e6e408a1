# services/sessions.py
# One active scoring session per judge; the newest session always wins

import logging

from sqlalchemy.exc import SQLAlchemyError

from errors import DataAccessError, NotFoundError, Result, ValidationError
from extensions import db
from models import EvaluationSession
from time_utils import utcnow

logger = logging.getLogger(__name__)


def _require_id(value, name):
    if value is None or isinstance(value, bool):
        raise ValidationError(f'{name} is required')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an integer')


def start_session(judge_id, event_id, session_name=None, notes=None):
    """
    Open a session for the judge, first closing every session of theirs that
    is still active. There is no check that the replaced session was idle.
    """
    try:
        judge_id = _require_id(judge_id, 'judge_id')
        event_id = _require_id(event_id, 'event_id')
    except ValidationError as e:
        return Result.fail(e)

    now = utcnow()
    try:
        closed = EvaluationSession.query.filter_by(judge_id=judge_id, is_active=True).update(
            {'is_active': False, 'ended_at': now}, synchronize_session='fetch'
        )
        session = EvaluationSession(
            judge_id=judge_id,
            event_id=event_id,
            session_name=session_name,
            notes=notes,
            is_active=True,
            started_at=now,
        )
        db.session.add(session)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to start evaluation session for judge %s", judge_id)
        return Result.fail(DataAccessError('Could not start evaluation session'))

    if closed:
        logger.info("Judge %s: closed %d active session(s) before starting %s", judge_id, closed, session.id)
    return Result.ok(session)


def end_session(session_id):
    try:
        session = db.session.get(EvaluationSession, session_id)
        if session is None:
            return Result.fail(NotFoundError('Evaluation session not found'))
        session.is_active = False
        session.ended_at = utcnow()
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to end evaluation session %s", session_id)
        return Result.fail(DataAccessError('Could not end evaluation session'))
    return Result.ok(session)


def get_active_session(judge_id):
    try:
        session = (
            EvaluationSession.query
            .filter_by(judge_id=judge_id, is_active=True)
            .order_by(EvaluationSession.started_at.desc(), EvaluationSession.id.desc())
            .first()
        )
    except SQLAlchemyError:
        logger.exception("Failed to load active session for judge %s", judge_id)
        return Result.fail(DataAccessError('Could not load evaluation session'))
    return Result.ok(session)
