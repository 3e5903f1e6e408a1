# services/evaluations.py
# Score submission, completion checks and result publication

import logging
import math
from collections import defaultdict

from sqlalchemy import distinct, func
from sqlalchemy.exc import SQLAlchemyError

from errors import DataAccessError, InvalidTransitionError, NotFoundError, Result, ValidationError
from extensions import db
from guards import require_admin, require_operator_or_admin
from hooks import EVENTS_LIST, RANKINGS, VOTING, audit, invalidate
from models import Evaluation, EvaluationSession, Event, EventJudge, Judge, Participant
from models.evaluation import MAX_SCORE, MIN_SCORE
from services.rankings import round_score

logger = logging.getLogger(__name__)


def _int_field(data, name):
    value = data.get(name)
    if value is None or value == '' or isinstance(value, bool):
        raise ValidationError(f'{name} is required')
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f'{name} must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an integer')


def validate_evaluation(data):
    """Check a submission before touching the database. Returns clean values."""
    values = {name: _int_field(data, name) for name in ('event_id', 'judge_id', 'participant_id', 'score')}
    if not MIN_SCORE <= values['score'] <= MAX_SCORE:
        raise ValidationError(f'score must be between {MIN_SCORE} and {MAX_SCORE}')
    notes = data.get('notes')
    values['notes'] = (notes.strip() or None) if isinstance(notes, str) else None
    return values


def submit_evaluation(data, *, authorize=require_operator_or_admin):
    authorize()
    try:
        values = validate_evaluation(data)
    except ValidationError as e:
        return Result.fail(e)

    try:
        event = db.session.get(Event, values['event_id'])
        if event is None:
            return Result.fail(NotFoundError('Event not found'))
        if db.session.get(Judge, values['judge_id']) is None:
            return Result.fail(NotFoundError('Judge not found'))
        if db.session.get(Participant, values['participant_id']) is None:
            return Result.fail(NotFoundError('Participant not found'))
        if event.status != 'ongoing':
            return Result.fail(InvalidTransitionError(
                f'Cannot record evaluations for event with status "{event.status}"'
            ))

        session = (
            EvaluationSession.query
            .filter_by(judge_id=values['judge_id'], event_id=event.id, is_active=True)
            .order_by(EvaluationSession.started_at.desc())
            .first()
        )
        evaluation = Evaluation(session_id=session.id if session else None, **values)
        db.session.add(evaluation)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to save evaluation for event %s", values['event_id'])
        return Result.fail(DataAccessError('Could not save evaluation'))

    invalidate(VOTING)
    return Result.ok(evaluation, message='Evaluation saved')


def list_event_evaluations(event_id):
    try:
        evaluations = (
            Evaluation.query.filter_by(event_id=event_id)
            .order_by(Evaluation.created_at.desc(), Evaluation.id.desc())
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to load evaluations for event %s", event_id)
        return Result.fail(DataAccessError('Could not load evaluations'))
    return Result.ok(evaluations)


def list_participant_evaluations(participant_id, event_id):
    try:
        evaluations = (
            Evaluation.query.filter_by(participant_id=participant_id, event_id=event_id)
            .order_by(Evaluation.created_at.desc(), Evaluation.id.desc())
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to load evaluations of participant %s", participant_id)
        return Result.fail(DataAccessError('Could not load evaluations'))
    return Result.ok(evaluations)


def check_participant_evaluation_status(event_id, participant_id):
    """
    Has every judge of the event scored this participant?

    Compares the number of judge assignments with the number of evaluation
    rows, published or not. Completion is `completed >= total`, so duplicate
    rows from one judge can mark a participant complete early.
    """
    try:
        total_judges = EventJudge.query.filter_by(event_id=event_id).count()
        scores = [
            score for (score,) in
            db.session.query(Evaluation.score).filter_by(event_id=event_id, participant_id=participant_id)
        ]
    except SQLAlchemyError:
        logger.exception("Failed to check evaluation status of participant %s", participant_id)
        return Result.fail(DataAccessError('Could not check evaluation status'))

    completed = len(scores)
    is_complete = completed >= total_judges
    avg_score = round_score(sum(scores) / completed) if is_complete and completed else 0
    return Result.ok({
        'total_judges': total_judges,
        'completed_evaluations': completed,
        'is_complete': is_complete,
        'avg_score': avg_score,
        'missing_judges': total_judges - completed,
    })


def get_event_evaluation_stats(event_id):
    try:
        total_judges = EventJudge.query.filter_by(event_id=event_id).count()
        total_participants = (
            db.session.query(func.count(distinct(Evaluation.participant_id)))
            .filter(Evaluation.event_id == event_id)
            .scalar()
        ) or 0
        completed = Evaluation.query.filter_by(event_id=event_id).count()
    except SQLAlchemyError:
        logger.exception("Failed to load evaluation stats for event %s", event_id)
        return Result.fail(DataAccessError('Could not load evaluation stats'))

    expected = total_judges * total_participants
    return Result.ok({
        'total_judges': total_judges,
        'total_participants': total_participants,
        'completed_evaluations': completed,
        'expected_evaluations': expected,
        'progress_percentage': math.floor(completed / expected * 100 + 0.5) if expected else 0,
        'is_complete': completed >= expected,
    })


def publish_event_results(event_id, *, authorize=require_admin):
    """Reveal every evaluation of the event in the public rankings."""
    user = authorize()
    try:
        if db.session.get(Event, event_id) is None:
            return Result.fail(NotFoundError('Event not found'))
        published = Evaluation.query.filter_by(event_id=event_id).update(
            {'is_published': True}, synchronize_session='fetch'
        )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to publish results of event %s", event_id)
        return Result.fail(DataAccessError('Could not publish results'))

    logger.info("Published %d evaluation(s) of event %s", published, event_id)
    invalidate(VOTING, RANKINGS, EVENTS_LIST)
    audit('results_published', event_id=event_id, user=user, published=published)
    return Result.ok(published, message='Results published')


def get_event_participants_with_evaluations(event_id):
    """Voting sheet: approved participants with their scores for the event."""
    try:
        participants = (
            Participant.query.filter_by(status='approved', archived=False)
            .order_by(Participant.name, Participant.id)
            .all()
        )
        rows = (
            db.session.query(Evaluation, Judge.name)
            .join(Judge, Evaluation.judge_id == Judge.id)
            .filter(Evaluation.event_id == event_id)
            .order_by(Evaluation.id)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to load voting sheet for event %s", event_id)
        return Result.fail(DataAccessError('Could not load participants'))

    by_participant = defaultdict(list)
    for evaluation, judge_name in rows:
        by_participant[evaluation.participant_id].append({
            'judge_id': evaluation.judge_id,
            'judge_name': judge_name,
            'score': evaluation.score,
            'notes': evaluation.notes,
            'is_published': evaluation.is_published,
        })

    sheet = []
    for participant in participants:
        evaluations = by_participant.get(participant.id, [])
        average = sum(e['score'] for e in evaluations) / len(evaluations) if evaluations else 0
        sheet.append({
            'id': participant.id,
            'name': participant.name,
            'category': participant.category,
            'total_evaluations': len(evaluations),
            'avg_score': round_score(average),
            'evaluations': evaluations,
        })
    return Result.ok(sheet)
