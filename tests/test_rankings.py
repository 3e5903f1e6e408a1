from types import SimpleNamespace

import pytest
from sqlalchemy.exc import SQLAlchemyError

from errors import DataAccessError, NotFoundError
from services import rankings
from services.rankings import build_rankings, phase_label, round_score


def row(participant_id, score, judge_id=1, name=None):
    return SimpleNamespace(
        participant_id=participant_id,
        participant_name=name or f'P{participant_id}',
        judge_id=judge_id,
        judge_name=f'J{judge_id}',
        score=score,
        notes=None,
    )


@pytest.mark.parametrize('value, expected', [
    (8.5, 8.5),
    (7.666, 7.67),
    (7.664, 7.66),
    (23 / 3, 7.67),
    (0, 0),
])
def test_round_score(value, expected):
    assert round_score(value) == pytest.approx(expected)


def test_phase_label():
    assert phase_label('classificatoria') == 'Classificatória'
    assert phase_label('semi-final') == 'Semi-Final'
    assert phase_label('final') == 'Final'
    assert phase_label('gala') == 'gala'


def test_build_rankings_orders_by_average():
    ranked = build_rankings([row(2, 6), row(1, 8), row(2, 7, judge_id=2), row(1, 9, judge_id=2)])

    assert [(r.participant_id, r.average_score, r.position) for r in ranked] == [(1, 8.5, 1), (2, 6.5, 2)]
    assert ranked[0].total_scores == 2
    assert [e.score for e in ranked[0].evaluations] == [8, 9]


def test_equal_averages_get_sequential_positions():
    ranked = build_rankings([row(5, 80), row(3, 80)])
    assert [(r.participant_id, r.position) for r in ranked] == [(3, 1), (5, 2)]


def test_equal_averages_prefer_more_scores():
    ranked = build_rankings([row(1, 80), row(2, 80), row(2, 80, judge_id=2)])
    assert [r.participant_id for r in ranked] == [2, 1]


def test_repeated_judge_rows_are_counted():
    ranked = build_rankings([row(1, 90), row(1, 60)])
    assert ranked[0].total_scores == 2
    assert ranked[0].average_score == 75


def test_build_rankings_empty():
    assert build_rankings([]) == []


def test_event_ranking_uses_published_scores(make_event, make_participant, make_judge, score):
    event = make_event(status='ongoing')
    a = make_participant('A')
    b = make_participant('B')
    c = make_participant('C')
    j1 = make_judge(event=event)
    j2 = make_judge(event=event)
    score(event, j1, a, 8)
    score(event, j2, a, 9)
    score(event, j1, b, 6)
    score(event, j2, b, 7)
    score(event, j1, c, 10, published=False)

    result = rankings.get_event_ranking(event.id)

    assert result.success
    data = result.data
    assert [(r.participant_name, r.average_score, r.position) for r in data.rankings] == [
        ('A', 8.5, 1),
        ('B', 6.5, 2),
    ]
    assert data.total_participants == 2
    assert data.evaluated_participants == 2
    assert data.event['name'] == event.name
    assert data.event['status'] == 'ongoing'
    # The unpublished score still counts towards the phase summary
    assert [(p.type, p.status, p.participant_count) for p in data.phases] == [('classificatoria', 'ongoing', 3)]


def test_average_is_rounded(make_event, make_participant, make_judge, score):
    event = make_event(status='ongoing')
    participant = make_participant()
    for value in (7, 8, 8):
        score(event, make_judge(event=event), participant, value)

    ranking = rankings.get_event_ranking(event.id).data.rankings[0]

    assert ranking.average_score == 7.67


def test_phases_follow_competition_order(make_event, make_participant, make_judge, score):
    make_event(name='Final', type='final', status='draft')
    make_event(name='Gala', type='gala', status='published')
    semi = make_event(name='Semi', type='semi-final', status='published')
    qualifier = make_event(name='Qualifier', type='classificatoria', status='completed')
    make_event(name='Other category', category='concertina', status='completed')
    make_event(name='Hidden', type='final', status='completed', is_public=False)
    judge = make_judge()
    for participant in (make_participant(), make_participant()):
        score(qualifier, judge, participant, 70)

    phases = rankings.get_event_ranking(semi.id).data.phases

    assert [(p.type, p.name, p.status) for p in phases] == [
        ('classificatoria', 'Classificatória', 'completed'),
        ('semi-final', 'Semi-Final', 'published'),
        ('final', 'Final', 'draft'),
        ('gala', 'gala', 'published'),
    ]
    assert [p.participant_count for p in phases] == [2, 0, 0, 0]


def test_ranking_to_dict(make_event, make_participant, make_judge, score):
    event = make_event(status='completed')
    score(event, make_judge(event=event), make_participant('A'), 90, notes='Great voice')

    data = rankings.get_event_ranking(event.id).data.to_dict()

    assert data['rankings'][0]['evaluations'][0]['notes'] == 'Great voice'
    assert data['rankings'][0]['position'] == 1


def test_event_ranking_not_found(app):
    result = rankings.get_event_ranking(404)
    assert isinstance(result.error, NotFoundError)


def test_event_ranking_data_error(make_event, monkeypatch):
    event = make_event()

    def broken(event_ids):
        raise SQLAlchemyError('connection lost')

    monkeypatch.setattr(rankings, '_published_rows', broken)
    result = rankings.get_event_ranking(event.id)

    assert isinstance(result.error, DataAccessError)
    assert result.error_message == 'Could not load rankings'


def test_all_event_rankings(make_event, make_participant, make_judge, score):
    first = make_event(name='Qualifier', status='completed')
    second = make_event(name='Final', type='final', status='draft')
    make_event(name='Private', is_public=False)
    a = make_participant('A')
    b = make_participant('B')
    j1 = make_judge()
    j2 = make_judge()
    score(first, j1, a, 80)
    score(first, j1, b, 80)
    score(first, j2, b, 80)
    score(first, j2, a, 95, published=False)

    summaries = rankings.get_all_event_rankings().data

    assert [s['name'] for s in summaries] == ['Qualifier', 'Final']
    qualifier = summaries[0]
    assert qualifier['participant_count'] == 2
    assert qualifier['evaluated_count'] == 3
    # Same tie-break as the event ranking: more scores wins
    assert qualifier['top_participant'] == {'name': 'B', 'score': 80}
    assert summaries[1]['top_participant'] is None
    assert summaries[1]['participant_count'] == 0
    assert second.id == summaries[1]['id']


def test_all_event_rankings_empty(app):
    assert rankings.get_all_event_rankings().data == []
