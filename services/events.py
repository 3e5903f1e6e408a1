# services/events.py
# Event lifecycle: guarded status transitions plus ordinary event editing

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from errors import DataAccessError, InvalidTransitionError, NotFoundError, Result, ValidationError
from extensions import db
from guards import require_admin
from hooks import EVENTS_LIST, VOTING, audit, emit, event_transitioned, invalidate
from models import Evaluation, EvaluationSession, Event, EventJudge, EventRegistration
from models.event import CRITICAL_FIELDS, EDITABLE_FIELDS
from time_utils import utcnow

logger = logging.getLogger(__name__)

# operation -> (statuses it may start from, status it leaves behind, audit action)
TRANSITIONS = {
    'publish': (('draft',), 'published', 'event_published'),
    'start': (('published',), 'ongoing', 'event_started'),
    'complete': (('ongoing',), 'completed', 'event_completed'),
    'cancel': (('published', 'ongoing'), 'cancelled', 'event_cancelled'),
    'revert': (('draft', 'published'), 'draft', 'event_reverted_to_draft'),
}

SUCCESS_MESSAGES = {
    'publish': 'Event published',
    'start': 'Event started',
    'complete': 'Event completed',
    'cancel': 'Event cancelled',
    'revert': 'Event reverted to draft',
}

REQUIRED_FIELDS = ('name', 'type', 'category', 'location', 'start_date')
DATE_FIELDS = ('start_date', 'end_date', 'registration_start_date', 'registration_end_date')


def transition_error(operation, status):
    if operation == 'revert' and status == 'ongoing':
        return InvalidTransitionError('Cannot revert an ongoing event to draft')
    if operation == 'revert':
        return InvalidTransitionError(f'Cannot revert event with status "{status}" to draft')
    if operation == 'delete':
        return InvalidTransitionError(
            f'Cannot delete event with status "{status}". Only draft events can be deleted.'
        )
    return InvalidTransitionError(f'Cannot {operation} event with status "{status}"')


def _load_event(event_id):
    return db.session.get(Event, event_id)


def _transition(operation, event_id, authorize, extra_values=None, **audit_details):
    user = authorize()
    allowed, new_status, action = TRANSITIONS[operation]

    try:
        event = _load_event(event_id)
        if event is None:
            return Result.fail(NotFoundError('Event not found'))
        if event.status not in allowed:
            logger.warning("Refused to %s event %s in status %s", operation, event_id, event.status)
            return Result.fail(transition_error(operation, event.status))

        values = {'status': new_status, 'updated_at': utcnow()}
        if extra_values is not None:
            values.update(extra_values(event))

        # The status guard is repeated in the UPDATE so a concurrent transition
        # between the read above and this write cannot be overwritten.
        changed = Event.query.filter(Event.id == event_id, Event.status.in_(allowed)).update(
            values, synchronize_session=False
        )
        if changed == 0:
            db.session.rollback()
            current = db.session.get(Event, event_id)
            if current is None:
                return Result.fail(NotFoundError('Event not found'))
            logger.warning("Event %s changed to %s while trying to %s it", event_id, current.status, operation)
            return Result.fail(transition_error(operation, current.status))
        db.session.commit()
        event = db.session.get(Event, event_id)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to %s event %s", operation, event_id)
        return Result.fail(DataAccessError(f'Could not {operation} event'))

    logger.info("Event %s: %s -> %s by user %s", event_id, operation, new_status, user.id)
    invalidate(EVENTS_LIST, VOTING)
    emit(event_transitioned, event=event, action=action, user=user, **audit_details)
    return Result.ok(event, message=SUCCESS_MESSAGES[operation])


def publish_event(event_id, *, authorize=require_admin):
    return _transition('publish', event_id, authorize)


def start_event(event_id, *, authorize=require_admin):
    return _transition('start', event_id, authorize)


def complete_event(event_id, *, authorize=require_admin):
    return _transition('complete', event_id, authorize)


def cancel_event(event_id, reason=None, *, authorize=require_admin):
    """Cancel a published or ongoing event, appending the reason to its notes."""
    def cancellation_notes(event):
        if not reason:
            return {}
        return {'notes': f"{event.notes or ''}\nCancelled: {reason}".strip()}

    return _transition('cancel', event_id, authorize, extra_values=cancellation_notes, reason=reason)


def revert_to_draft(event_id, *, authorize=require_admin):
    return _transition('revert', event_id, authorize)


def delete_event(event_id, *, authorize=require_admin):
    """Remove a draft event together with its registrations, judges and sessions."""
    user = authorize()
    try:
        event = _load_event(event_id)
        if event is None:
            return Result.fail(NotFoundError('Event not found'))
        if event.status != 'draft':
            return Result.fail(transition_error('delete', event.status))
        name = event.name

        deleted = Event.query.filter(Event.id == event_id, Event.status == 'draft').delete()
        if deleted == 0:
            db.session.rollback()
            current = db.session.get(Event, event_id)
            if current is None:
                return Result.fail(NotFoundError('Event not found'))
            return Result.fail(transition_error('delete', current.status))
        for model in (Evaluation, EvaluationSession, EventJudge, EventRegistration):
            model.query.filter_by(event_id=event_id).delete()
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to delete event %s", event_id)
        return Result.fail(DataAccessError('Could not delete event'))

    logger.info("Event %s deleted by user %s", event_id, user.id)
    invalidate(EVENTS_LIST)
    audit('event_deleted', event_id=event_id, user=user, description=f'Event "{name}" deleted')
    return Result.ok(None, message='Event deleted')


def _parse_datetime(field, value):
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f'Invalid date for {field}: {value}')


def _clean_fields(data):
    fields = {key: value for key, value in data.items() if key in EDITABLE_FIELDS}
    for field in DATE_FIELDS:
        if field in fields:
            fields[field] = _parse_datetime(field, fields[field])
    if fields.get('max_participants') is not None:
        try:
            fields['max_participants'] = int(fields['max_participants'])
        except (TypeError, ValueError):
            raise ValidationError('max_participants must be an integer')
        if fields['max_participants'] < 0:
            raise ValidationError('max_participants cannot be negative')
    return fields


def create_event(data, *, authorize=require_admin):
    user = authorize()

    missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
    if missing:
        return Result.fail(ValidationError(f"Missing required fields: {', '.join(missing)}"))
    try:
        fields = _clean_fields(data)
    except ValidationError as e:
        return Result.fail(e)
    fields.pop('status', None)

    event = Event(status='draft', created_by=user.id, **fields)
    try:
        db.session.add(event)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to create event")
        return Result.fail(DataAccessError('Could not create event'))

    invalidate(EVENTS_LIST)
    audit('event_created', event_id=event.id, user=user, description=f'Event "{event.name}" created')
    return Result.ok(event, message='Event created')


def update_event(event_id, data, *, authorize=require_admin):
    """
    Apply a partial edit. Status only moves through the lifecycle operations,
    and once the event has left draft the other critical fields are dropped
    from the payload instead of being rejected.
    """
    authorize()
    try:
        fields = _clean_fields(data)
    except ValidationError as e:
        return Result.fail(e)
    fields.pop('status', None)

    try:
        event = _load_event(event_id)
        if event is None:
            return Result.fail(NotFoundError('Event not found'))

        if event.status != 'draft':
            dropped = sorted(CRITICAL_FIELDS.intersection(fields))
            if dropped:
                logger.info("Ignoring frozen fields %s on %s event %s", dropped, event.status, event_id)
            fields = {key: value for key, value in fields.items() if key not in CRITICAL_FIELDS}

        if not fields:
            return Result.ok(event)

        for key, value in fields.items():
            setattr(event, key, value)
        event.updated_at = utcnow()
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to update event %s", event_id)
        return Result.fail(DataAccessError('Could not update event'))

    invalidate(EVENTS_LIST)
    return Result.ok(event, message='Event updated')


def get_event(event_id):
    try:
        event = _load_event(event_id)
    except SQLAlchemyError:
        logger.exception("Failed to load event %s", event_id)
        return Result.fail(DataAccessError('Could not load event'))
    if event is None:
        return Result.fail(NotFoundError('Event not found'))
    return Result.ok(event)


def _list(query, what):
    try:
        return Result.ok(query.all())
    except SQLAlchemyError:
        logger.exception("Failed to load %s", what)
        return Result.fail(DataAccessError(f'Could not load {what}'))


def list_events():
    return _list(Event.query.order_by(Event.created_at.desc(), Event.id.desc()), 'events')


def list_active_events():
    return _list(Event.query.filter_by(status='ongoing').order_by(Event.start_date.desc()), 'active events')


def list_published_events():
    return _list(Event.query.filter_by(status='published').order_by(Event.start_date.desc()), 'published events')
