# services/rankings.py
# Leaderboards built from published evaluations

import logging
import math
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from typing import List, Optional

from sqlalchemy import case, distinct, func
from sqlalchemy.exc import SQLAlchemyError

from errors import DataAccessError, NotFoundError, Result
from extensions import db
from models import Evaluation, Event, Judge, Participant

logger = logging.getLogger(__name__)

PHASE_LABELS = {
    'classificatoria': 'Classificatória',
    'semi-final': 'Semi-Final',
    'final': 'Final',
}
PHASE_PRECEDENCE = {'classificatoria': 1, 'semi-final': 2, 'final': 3}
OTHER_PHASE = 4


@dataclass
class JudgeScore:
    judge_id: int
    judge_name: str
    score: int
    notes: Optional[str] = None


@dataclass
class ParticipantRanking:
    participant_id: int
    participant_name: str
    average_score: float
    total_scores: int
    evaluations: List[JudgeScore] = field(default_factory=list)
    position: int = 0


@dataclass
class Phase:
    type: str
    name: str
    status: str
    participant_count: int


@dataclass
class EventRankingData:
    event: dict
    rankings: List[ParticipantRanking]
    phases: List[Phase]
    total_participants: int
    evaluated_participants: int

    def to_dict(self):
        return asdict(self)


def round_score(value):
    """Two decimals, halves rounded up: round(mean * 100) / 100."""
    return math.floor(value * 100 + 0.5) / 100


def phase_label(event_type):
    return PHASE_LABELS.get(event_type, event_type)


def ranking_sort_key(ranking):
    # Ties on the average go to the participant with more scores, then the lower id
    return (-ranking.average_score, -ranking.total_scores, ranking.participant_id)


def build_rankings(rows):
    """
    Group evaluation rows by participant and rank them.

    Each row needs participant_id, participant_name, judge_id, judge_name,
    score and notes. Repeated rows for the same judge are all counted.
    Positions are strictly sequential: equal averages still get 1, 2, ...
    """
    buckets = {}
    for row in rows:
        bucket = buckets.get(row.participant_id)
        if bucket is None:
            bucket = buckets[row.participant_id] = ParticipantRanking(
                participant_id=row.participant_id,
                participant_name=row.participant_name,
                average_score=0,
                total_scores=0,
            )
        bucket.evaluations.append(JudgeScore(row.judge_id, row.judge_name, row.score, row.notes))

    for bucket in buckets.values():
        bucket.total_scores = len(bucket.evaluations)
        if bucket.total_scores:
            mean = sum(e.score for e in bucket.evaluations) / bucket.total_scores
            bucket.average_score = round_score(mean)

    rankings = sorted(buckets.values(), key=ranking_sort_key)
    for index, ranking in enumerate(rankings):
        ranking.position = index + 1
    return rankings


def _published_rows(event_ids):
    return (
        db.session.query(
            Evaluation.event_id,
            Evaluation.participant_id,
            Participant.name.label('participant_name'),
            Evaluation.judge_id,
            Judge.name.label('judge_name'),
            Evaluation.score,
            Evaluation.notes,
        )
        .join(Participant, Evaluation.participant_id == Participant.id)
        .join(Judge, Evaluation.judge_id == Judge.id)
        .filter(Evaluation.event_id.in_(event_ids), Evaluation.is_published.is_(True))
        .order_by(Evaluation.score.desc(), Evaluation.id)
        .all()
    )


def _phases(category):
    precedence = case(
        *[(Event.type == event_type, rank) for event_type, rank in PHASE_PRECEDENCE.items()],
        else_=OTHER_PHASE,
    )
    rows = (
        db.session.query(
            Event.type,
            Event.status,
            func.count(distinct(Evaluation.participant_id)).label('participant_count'),
        )
        .outerjoin(Evaluation, Evaluation.event_id == Event.id)
        .filter(Event.category == category, Event.is_public.is_(True))
        .group_by(Event.type, Event.status)
        .order_by(precedence, Event.type, Event.status)
        .all()
    )
    return [
        Phase(type=row.type, name=phase_label(row.type), status=row.status,
              participant_count=row.participant_count or 0)
        for row in rows
    ]


def _event_summary(event):
    return {
        'id': event.id,
        'name': event.name,
        'description': event.description,
        'type': event.type,
        'category': event.category,
        'start_date': event.start_date.isoformat() if event.start_date else None,
        'location': event.location,
        'status': event.status,
    }


def get_event_ranking(event_id):
    try:
        event = db.session.get(Event, event_id)
        if event is None:
            return Result.fail(NotFoundError('Event not found'))

        rankings = build_rankings(_published_rows([event_id]))
        phases = _phases(event.category)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to build ranking for event %s", event_id)
        return Result.fail(DataAccessError('Could not load rankings'))

    return Result.ok(EventRankingData(
        event=_event_summary(event),
        rankings=rankings,
        phases=phases,
        total_participants=len(rankings),
        evaluated_participants=len([r for r in rankings if r.total_scores > 0]),
    ))


def get_all_event_rankings():
    """Summary of every public event with its leader on published scores."""
    try:
        rows = (
            db.session.query(
                Event,
                func.count(distinct(Evaluation.participant_id)).label('participant_count'),
                func.count(case((Evaluation.is_published.is_(True), 1))).label('evaluated_count'),
            )
            .outerjoin(Evaluation, Evaluation.event_id == Event.id)
            .filter(Event.is_public.is_(True))
            .group_by(Event.id)
            .order_by(Event.start_date, Event.id)
            .all()
        )

        rows_by_event = defaultdict(list)
        if rows:
            for row in _published_rows([event.id for event, _, _ in rows]):
                rows_by_event[row.event_id].append(row)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to build event rankings")
        return Result.fail(DataAccessError('Could not load rankings'))

    summaries = []
    for event, participant_count, evaluated_count in rows:
        rankings = build_rankings(rows_by_event[event.id])
        top = rankings[0] if rankings else None
        summaries.append({
            'id': event.id,
            'name': event.name,
            'type': event.type,
            'category': event.category,
            'status': event.status,
            'start_date': event.start_date.isoformat() if event.start_date else None,
            'participant_count': participant_count or 0,
            'evaluated_count': evaluated_count or 0,
            'top_participant': {'name': top.participant_name, 'score': top.average_score} if top else None,
        })
    return Result.ok(summaries)
