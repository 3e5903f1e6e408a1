from errors import NotFoundError, ValidationError
from services import judges


def test_create_and_list_judges(as_admin):
    judges.create_judge({'name': 'Rui Veloso', 'description': 'Composer'}, authorize=as_admin)
    inactive = judges.create_judge({'name': 'Amália', 'is_active': False}, authorize=as_admin).data

    assert [j.name for j in judges.list_judges().data] == ['Amália', 'Rui Veloso']
    assert [j.name for j in judges.list_judges(active_only=True).data] == ['Rui Veloso']
    assert inactive.is_active is False


def test_create_judge_requires_name(as_admin):
    assert isinstance(judges.create_judge({}, authorize=as_admin).error, ValidationError)


def test_update_and_deactivate(make_judge, as_admin):
    judge = make_judge('Mariza')

    judges.update_judge(judge.id, {'notes': 'Head of jury'}, authorize=as_admin)
    result = judges.deactivate_judge(judge.id, authorize=as_admin)

    assert result.data.notes == 'Head of jury'
    assert result.data.is_active is False
    assert isinstance(judges.update_judge(99, {'notes': 'x'}, authorize=as_admin).error, NotFoundError)
    assert isinstance(judges.update_judge(judge.id, {'name': ''}, authorize=as_admin).error, ValidationError)


def test_assign_judges_to_event(make_event, make_judge, as_admin):
    event = make_event()
    first = make_judge('Beatriz')
    second = make_judge('Artur')

    judges.add_judge_to_event(event.id, first.id, authorize=as_admin)
    judges.add_judge_to_event(event.id, second.id, authorize=as_admin)
    duplicate = judges.add_judge_to_event(event.id, first.id, authorize=as_admin)

    assert isinstance(duplicate.error, ValidationError)
    assert [j.name for j in judges.list_event_judges(event.id).data] == ['Artur', 'Beatriz']

    assert judges.remove_judge_from_event(event.id, second.id, authorize=as_admin).data == 1
    assert [j.name for j in judges.list_event_judges(event.id).data] == ['Beatriz']


def test_assign_unknown_judge(make_event, as_admin):
    event = make_event()
    assert isinstance(judges.add_judge_to_event(event.id, 42, authorize=as_admin).error, NotFoundError)
    assert isinstance(judges.add_judge_to_event(42, 1, authorize=as_admin).error, NotFoundError)
