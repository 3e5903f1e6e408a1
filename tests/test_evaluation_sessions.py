from errors import NotFoundError, ValidationError
from models import EvaluationSession
from services import sessions


def test_new_session_closes_previous_ones(db, make_event, make_judge):
    first_event = make_event()
    second_event = make_event(name='Semi', type='semi-final')
    judge = make_judge()

    first = sessions.start_session(judge.id, first_event.id, session_name='Morning').data
    second = sessions.start_session(judge.id, second_event.id, session_name='Evening').data

    active = EvaluationSession.query.filter_by(judge_id=judge.id, is_active=True).all()
    assert [s.id for s in active] == [second.id]
    closed = db.session.get(EvaluationSession, first.id)
    assert closed.is_active is False
    assert closed.ended_at is not None


def test_sessions_of_other_judges_are_untouched(make_event, make_judge):
    event = make_event()
    judge = make_judge()
    other = make_judge()

    sessions.start_session(other.id, event.id)
    sessions.start_session(judge.id, event.id)
    sessions.start_session(judge.id, event.id)

    assert EvaluationSession.query.filter_by(judge_id=other.id, is_active=True).count() == 1
    assert EvaluationSession.query.filter_by(judge_id=judge.id, is_active=True).count() == 1


def test_get_active_session(make_event, make_judge):
    event = make_event()
    judge = make_judge()

    assert sessions.get_active_session(judge.id).data is None
    started = sessions.start_session(judge.id, event.id, session_name='Round 1').data

    active = sessions.get_active_session(judge.id).data
    assert active.id == started.id
    assert active.session_name == 'Round 1'


def test_end_session(make_event, make_judge):
    event = make_event()
    judge = make_judge()
    started = sessions.start_session(judge.id, event.id).data

    result = sessions.end_session(started.id)

    assert result.success
    assert result.data.is_active is False
    assert result.data.ended_at is not None
    assert sessions.get_active_session(judge.id).data is None


def test_end_unknown_session(app):
    assert isinstance(sessions.end_session(123).error, NotFoundError)


def test_start_session_validates_ids(make_event):
    event = make_event()
    result = sessions.start_session(None, event.id)
    assert isinstance(result.error, ValidationError)
    result = sessions.start_session('abc', event.id)
    assert result.error_message == 'judge_id must be an integer'
    assert EvaluationSession.query.count() == 0
