# services/judges.py

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from errors import DataAccessError, NotFoundError, Result, ValidationError
from extensions import db
from guards import require_admin
from hooks import VOTING, invalidate
from models import Event, EventJudge, Judge
from time_utils import utcnow

logger = logging.getLogger(__name__)

JUDGE_FIELDS = ('name', 'description', 'is_active', 'notes')


def create_judge(data, *, authorize=require_admin):
    authorize()
    if not data.get('name'):
        return Result.fail(ValidationError('Judge name is required'))
    judge = Judge(**{key: data[key] for key in JUDGE_FIELDS if key in data})
    try:
        db.session.add(judge)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to create judge")
        return Result.fail(DataAccessError('Could not create judge'))
    return Result.ok(judge, message='Judge created')


def list_judges(active_only=False):
    query = Judge.query
    if active_only:
        query = query.filter_by(is_active=True)
    try:
        return Result.ok(query.order_by(Judge.name).all())
    except SQLAlchemyError:
        logger.exception("Failed to load judges")
        return Result.fail(DataAccessError('Could not load judges'))


def update_judge(judge_id, data, *, authorize=require_admin):
    authorize()
    fields = {key: data[key] for key in JUDGE_FIELDS if key in data}
    if 'name' in fields and not fields['name']:
        return Result.fail(ValidationError('Judge name cannot be empty'))
    try:
        judge = db.session.get(Judge, judge_id)
        if judge is None:
            return Result.fail(NotFoundError('Judge not found'))
        for key, value in fields.items():
            setattr(judge, key, value)
        judge.updated_at = utcnow()
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to update judge %s", judge_id)
        return Result.fail(DataAccessError('Could not update judge'))
    return Result.ok(judge)


def deactivate_judge(judge_id, *, authorize=require_admin):
    return update_judge(judge_id, {'is_active': False}, authorize=authorize)


def add_judge_to_event(event_id, judge_id, *, authorize=require_admin):
    authorize()
    try:
        if db.session.get(Event, event_id) is None:
            return Result.fail(NotFoundError('Event not found'))
        if db.session.get(Judge, judge_id) is None:
            return Result.fail(NotFoundError('Judge not found'))
        if EventJudge.query.filter_by(event_id=event_id, judge_id=judge_id).first():
            return Result.fail(ValidationError('Judge is already assigned to this event'))

        assignment = EventJudge(event_id=event_id, judge_id=judge_id)
        db.session.add(assignment)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return Result.fail(ValidationError('Judge is already assigned to this event'))
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to assign judge %s to event %s", judge_id, event_id)
        return Result.fail(DataAccessError('Could not assign judge'))

    invalidate(VOTING)
    return Result.ok(assignment, message='Judge assigned to event')


def remove_judge_from_event(event_id, judge_id, *, authorize=require_admin):
    authorize()
    try:
        removed = EventJudge.query.filter_by(event_id=event_id, judge_id=judge_id).delete()
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to remove judge %s from event %s", judge_id, event_id)
        return Result.fail(DataAccessError('Could not remove judge'))
    invalidate(VOTING)
    return Result.ok(removed)


def list_event_judges(event_id):
    try:
        judges = (
            Judge.query.join(EventJudge, EventJudge.judge_id == Judge.id)
            .filter(EventJudge.event_id == event_id)
            .order_by(Judge.name)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to load judges of event %s", event_id)
        return Result.fail(DataAccessError('Could not load judges'))
    return Result.ok(judges)
