# services/participants.py
# Participant review, event registration and the public registration form

import json
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from errors import DataAccessError, NotFoundError, Result, ValidationError
from extensions import db
from guards import require_admin
from hooks import EVENTS_LIST, PARTICIPANTS_LIST, emit, invalidate, participant_reviewed
from models import Event, EventRegistration, Participant
from notifications import notify_participant_status
from time_utils import utcnow

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('name', 'email', 'category', 'experience')
PARTICIPANT_FIELDS = (
    'name', 'stage_name', 'email', 'phone', 'age', 'category', 'experience',
    'additional_info', 'has_special_needs', 'special_needs_description',
    'accepts_email_notifications', 'notes',
)
# Details a returning participant may refresh when registering again
PROFILE_FIELDS = (
    'name', 'phone', 'category', 'experience', 'additional_info',
    'has_special_needs', 'special_needs_description', 'accepts_email_notifications',
)
PUBLIC_STATUSES = ('published', 'ongoing')
PAST_TENSE = {'approve': 'approved', 'reject': 'rejected'}

REGISTRATION_REFUSALS = {
    'not_open': 'Registration for this event has not opened yet',
    'closed': 'Registration for this event is closed',
    'full': 'This event is full',
}


def _normalize_email(value):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError('email must be a non-empty string')
    return value.strip().lower()


def _participant_fields(data):
    """Validate a registration form and return the participant columns it sets."""
    missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    if data.get('has_special_needs') and not data.get('special_needs_description'):
        raise ValidationError('Describe the special needs or clear the flag')

    fields = {name: data[name] for name in PARTICIPANT_FIELDS if name in data}
    fields['email'] = _normalize_email(fields['email'])
    return fields


def create_participant(data):
    """Public registration form. New participants wait for review."""
    try:
        fields = _participant_fields(data)
    except ValidationError as e:
        return Result.fail(e)

    participant = Participant(status='pending', **fields)
    try:
        db.session.add(participant)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return Result.fail(ValidationError(f'A participant with email {fields["email"]} already exists'))
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to register participant")
        return Result.fail(DataAccessError('Could not register participant'))

    invalidate(PARTICIPANTS_LIST)
    return Result.ok(participant, message='Registration received')


def registration_status(event, now=None):
    """
    Whether the public can sign up for an event right now.

    With a registration window, the window decides, then capacity. Without
    one, sign-up is open until the event starts. A max_participants of 0 or
    None means no limit. Returns one of not_open, open, closed, full.
    """
    now = now or utcnow()
    full = bool(event.max_participants) and (event.current_participants or 0) >= event.max_participants

    if event.registration_start_date and event.registration_end_date:
        if now < event.registration_start_date:
            return 'not_open'
        if now > event.registration_end_date:
            return 'closed'
        return 'full' if full else 'open'

    if now < event.start_date:
        return 'full' if full else 'open'
    return 'closed'


def _public_event_dict(event, now):
    status = registration_status(event, now)
    data = event.to_dict()
    data['registration_status'] = status
    data['can_register'] = status == 'open'
    return data


def available_events(now=None):
    """Public published and ongoing events, each with its registration status."""
    now = now or utcnow()
    try:
        events = (
            Event.query.filter(Event.is_public.is_(True), Event.status.in_(PUBLIC_STATUSES))
            .order_by(Event.start_date, Event.id)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to load events open for registration")
        return Result.fail(DataAccessError('Could not load events'))
    return Result.ok([_public_event_dict(event, now) for event in events])


def register_for_event(data, now=None):
    """
    Public sign-up for one event.

    A known email reuses the participant and refreshes their details. A new
    email creates an approved participant. Either way a registration row is
    added and the event counter goes up by one.
    """
    now = now or utcnow()
    try:
        event_id = data.get('event_id')
        if event_id is None or event_id == '' or isinstance(event_id, bool):
            raise ValidationError('event_id is required')
        try:
            event_id = int(event_id)
        except (TypeError, ValueError):
            raise ValidationError('event_id must be an integer')
        fields = _participant_fields(data)
    except ValidationError as e:
        return Result.fail(e)

    try:
        event = db.session.get(Event, event_id)
        if event is None or not event.is_public or event.status not in PUBLIC_STATUSES:
            return Result.fail(NotFoundError('Event not found'))
        status = registration_status(event, now)
        if status != 'open':
            return Result.fail(ValidationError(REGISTRATION_REFUSALS[status]))

        participant = Participant.query.filter_by(email=fields['email']).first()
        if participant is not None:
            already = EventRegistration.query.filter_by(event_id=event_id, participant_id=participant.id).first()
            if already:
                return Result.fail(ValidationError('Participant is already registered in this event'))
            for name in PROFILE_FIELDS:
                if name in fields:
                    setattr(participant, name, fields[name])
            participant.updated_at = now
        else:
            participant = Participant(status='approved', **fields)
            db.session.add(participant)
            db.session.flush()

        # The capacity check is repeated in the UPDATE so two sign-ups for the
        # last seat cannot both pass.
        taken = Event.query.filter(
            Event.id == event_id,
            or_(
                Event.max_participants.is_(None),
                Event.max_participants == 0,
                Event.current_participants < Event.max_participants,
            ),
        ).update(
            {'current_participants': Event.current_participants + 1, 'updated_at': now},
            synchronize_session=False,
        )
        if taken == 0:
            db.session.rollback()
            return Result.fail(ValidationError(REGISTRATION_REFUSALS['full']))

        registration = EventRegistration(event_id=event_id, participant_id=participant.id, status='registered')
        db.session.add(registration)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return Result.fail(ValidationError('Participant is already registered in this event'))
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed public registration for event %s", event_id)
        return Result.fail(DataAccessError('Could not process registration'))

    logger.info("Participant %s registered for event %s", participant.id, event_id)
    invalidate(EVENTS_LIST, PARTICIPANTS_LIST)
    return Result.ok(
        {'participant_id': participant.id, 'registration_id': registration.id},
        message='Registration confirmed',
    )


def get_registrations_by_email(email, event_id=None):
    """Registrations of the participant with this email, optionally for one event."""
    try:
        email = _normalize_email(email)
    except ValidationError as e:
        return Result.fail(e)

    try:
        participant = Participant.query.filter_by(email=email).first()
        if participant is None:
            return Result.fail(NotFoundError('No registrations found for this email'))
        query = (
            db.session.query(EventRegistration, Event)
            .join(Event, EventRegistration.event_id == Event.id)
            .filter(EventRegistration.participant_id == participant.id)
        )
        if event_id is not None:
            query = query.filter(EventRegistration.event_id == event_id)
        rows = query.order_by(Event.start_date, EventRegistration.id).all()
    except SQLAlchemyError:
        logger.exception("Failed to load registrations by email")
        return Result.fail(DataAccessError('Could not load registrations'))

    registrations = []
    for registration, event in rows:
        event_date = event.start_date.isoformat() if event.start_date else None
        registrations.append({
            'id': registration.id,
            'event_id': event.id,
            'event_name': event.name,
            'participant_name': participant.name,
            'status': registration.status,
            'registered_at': registration.registered_at.isoformat() if registration.registered_at else None,
            'event_date': event_date,
            # Payload of the check-in QR code
            'qr_data': json.dumps({
                'registration_id': registration.id,
                'participant_name': participant.name,
                'event_name': event.name,
                'event_date': event_date,
                'email': email,
            }),
        })
    return Result.ok(registrations)


def _notify(participant):
    # Notification is a side effect of a review that is already committed
    if not participant.accepts_email_notifications:
        return
    try:
        notify_participant_status(participant)
    except Exception:
        logger.exception("Could not notify participant %s about status %s", participant.id, participant.status)


def _review(participant_id, authorize, apply, action):
    done = PAST_TENSE[action]
    user = authorize()
    try:
        participant = db.session.get(Participant, participant_id)
        if participant is None:
            return Result.fail(NotFoundError('Participant not found'))
        apply(participant, user)
        participant.updated_at = utcnow()
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to %s participant %s", action, participant_id)
        return Result.fail(DataAccessError(f'Could not {action} participant'))

    invalidate(PARTICIPANTS_LIST)
    emit(participant_reviewed, participant=participant, action=f'participant_{done}', user=user)
    _notify(participant)
    return Result.ok(participant, message=f'Participant {done}')


def approve_participant(participant_id, *, authorize=require_admin):
    def apply(participant, user):
        participant.status = 'approved'
        participant.approved_at = utcnow()
        participant.approved_by = user.id
        participant.rejection_reason = None

    return _review(participant_id, authorize, apply, 'approve')


def reject_participant(participant_id, reason=None, *, authorize=require_admin):
    def apply(participant, user):
        participant.status = 'rejected'
        participant.rejected_at = utcnow()
        participant.rejected_by = user.id
        participant.rejection_reason = reason

    return _review(participant_id, authorize, apply, 'reject')


def archive_participant(participant_id, *, authorize=require_admin):
    """Hide a participant from active lists without losing their history."""
    authorize()
    try:
        participant = db.session.get(Participant, participant_id)
        if participant is None:
            return Result.fail(NotFoundError('Participant not found'))
        participant.archived = True
        participant.updated_at = utcnow()
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to archive participant %s", participant_id)
        return Result.fail(DataAccessError('Could not archive participant'))
    invalidate(PARTICIPANTS_LIST)
    return Result.ok(participant)


def register_participant_in_event(event_id, participant_id, *, authorize=require_admin):
    authorize()
    try:
        event = db.session.get(Event, event_id)
        if event is None:
            return Result.fail(NotFoundError('Event not found'))
        if db.session.get(Participant, participant_id) is None:
            return Result.fail(NotFoundError('Participant not found'))

        existing = EventRegistration.query.filter_by(event_id=event_id, participant_id=participant_id).first()
        if existing:
            return Result.fail(ValidationError('Participant is already registered in this event'))
        if event.is_full:
            return Result.fail(ValidationError(f'Event is full ({event.max_participants} participants)'))

        registration = EventRegistration(event_id=event_id, participant_id=participant_id, status='registered')
        db.session.add(registration)
        event.current_participants = (event.current_participants or 0) + 1
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return Result.fail(ValidationError('Participant is already registered in this event'))
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to register participant %s in event %s", participant_id, event_id)
        return Result.fail(DataAccessError('Could not register participant'))

    invalidate(EVENTS_LIST)
    return Result.ok(registration, message='Participant registered in event')


def remove_participant_from_event(event_id, participant_id, *, authorize=require_admin):
    authorize()
    try:
        removed = EventRegistration.query.filter_by(event_id=event_id, participant_id=participant_id).delete()
        if removed:
            event = db.session.get(Event, event_id)
            if event is not None:
                event.current_participants = max((event.current_participants or 0) - removed, 0)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to remove participant %s from event %s", participant_id, event_id)
        return Result.fail(DataAccessError('Could not remove participant'))

    invalidate(EVENTS_LIST)
    return Result.ok(removed, message='Participant removed from event')


def list_approved_participants():
    try:
        participants = (
            Participant.query.filter_by(status='approved', archived=False)
            .order_by(Participant.name)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to load approved participants")
        return Result.fail(DataAccessError('Could not load participants'))
    return Result.ok(participants)


def list_event_participants(event_id):
    try:
        rows = (
            db.session.query(EventRegistration, Participant)
            .join(Participant, EventRegistration.participant_id == Participant.id)
            .filter(EventRegistration.event_id == event_id)
            .order_by(EventRegistration.registered_at, EventRegistration.id)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to load participants of event %s", event_id)
        return Result.fail(DataAccessError('Could not load event participants'))
    return Result.ok([
        {'registration': registration.to_dict(), 'participant': participant.to_dict()}
        for registration, participant in rows
    ])
