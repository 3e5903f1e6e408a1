# hooks.py
# Post-mutation signals: view invalidation and the audit trail

import json
import logging

from blinker import Namespace
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import EventLog

logger = logging.getLogger(__name__)

_signals = Namespace()

# Sent with views=(...) naming the cached pages that are now stale
views_invalidated = _signals.signal('views-invalidated')
# Sent with event, action, user after a successful lifecycle operation
event_transitioned = _signals.signal('event-transitioned')
# Sent with participant, action, user after approval or rejection
participant_reviewed = _signals.signal('participant-reviewed')

EVENTS_LIST = 'events-list'
VOTING = 'voting'
RANKINGS = 'rankings'
PARTICIPANTS_LIST = 'participants-list'


def emit(signal, **kwargs):
    """Send a signal after a committed change. Receiver failures are only logged."""
    try:
        signal.send(None, **kwargs)
    except Exception:
        logger.exception("Receiver of '%s' failed", signal.name)


def invalidate(*views):
    """Signal that the named views are stale."""
    emit(views_invalidated, views=views)


def audit(action, event_id=None, participant_id=None, user=None,
          description=None, severity='info', **details):
    log = EventLog(
        event_id=event_id,
        participant_id=participant_id,
        action=action,
        description=description,
        details=json.dumps(details, default=str) if details else None,
        performed_by=user.id if user is not None else None,
        severity=severity,
    )
    try:
        db.session.add(log)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Could not write audit log '%s'", action)
        return None
    return log


@event_transitioned.connect
def _audit_event_transition(sender, event, action, user=None, **extra):
    audit(
        action,
        event_id=event.id,
        user=user,
        description=f'Event "{event.name}" is now {event.status}',
        status=event.status,
        **extra,
    )


@participant_reviewed.connect
def _audit_participant_review(sender, participant, action, user=None, **extra):
    audit(
        action,
        participant_id=participant.id,
        user=user,
        description=f'Participant "{participant.name}" {participant.status}',
        **extra,
    )
