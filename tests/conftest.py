from datetime import datetime

import pytest

from app import create_app
from config import TestConfig
from extensions import db as _db
from models import Evaluation, Event, EventJudge, Judge, Participant, User


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(db):
    user = User(code='000001', nickname='Admin', role='admin')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def operator(db):
    user = User(code='100001', nickname='Operator', role='operator')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def as_admin(admin):
    """Access gate that always lets the admin through."""
    return lambda: admin


@pytest.fixture
def make_event(db, admin):
    def _make_event(**overrides):
        values = dict(
            name='Fado: Classificatória',
            type='classificatoria',
            category='fado',
            location='Coliseu',
            start_date=datetime(2025, 6, 1, 21, 0),
            status='draft',
            created_by=admin.id,
        )
        values.update(overrides)
        event = Event(**values)
        db.session.add(event)
        db.session.commit()
        return event
    return _make_event


@pytest.fixture
def make_participant(db):
    counter = {'n': 0}

    def _make_participant(name=None, **overrides):
        counter['n'] += 1
        values = dict(
            name=name or f'Participant {counter["n"]}',
            email=f'participant{counter["n"]}@example.com',
            category='fado',
            experience='intermedio',
            status='approved',
        )
        values.update(overrides)
        participant = Participant(**values)
        db.session.add(participant)
        db.session.commit()
        return participant
    return _make_participant


@pytest.fixture
def make_judge(db):
    counter = {'n': 0}

    def _make_judge(name=None, event=None, **overrides):
        counter['n'] += 1
        judge = Judge(name=name or f'Judge {counter["n"]}', **overrides)
        db.session.add(judge)
        db.session.commit()
        if event is not None:
            db.session.add(EventJudge(event_id=event.id, judge_id=judge.id))
            db.session.commit()
        return judge
    return _make_judge


@pytest.fixture
def score(db):
    def _score(event, judge, participant, value, published=True, notes=None):
        evaluation = Evaluation(
            event_id=event.id,
            judge_id=judge.id,
            participant_id=participant.id,
            score=value,
            notes=notes,
            is_published=published,
        )
        db.session.add(evaluation)
        db.session.commit()
        return evaluation
    return _score
