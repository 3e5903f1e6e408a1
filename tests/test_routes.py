from datetime import datetime

import pytest


def login(client, code):
    return client.post('/login', json={'code': code})


@pytest.fixture
def admin_client(client, admin):
    login(client, admin.code)
    return client


def test_login_by_code(client, admin):
    response = login(client, '000001')
    assert response.status_code == 200
    assert response.get_json()['data'] == {'id': admin.id, 'nickname': 'Admin', 'role': 'admin'}


def test_login_errors(client, admin):
    assert client.post('/login', json={}).status_code == 400
    assert login(client, '999999').status_code == 401


def test_admin_routes_require_login(client, make_event):
    event = make_event()
    response = client.post(f'/admin/events/{event.id}/publish')
    assert response.status_code == 403
    assert response.get_json() == {'success': False, 'error': 'Authentication required', 'code': 'forbidden'}


def test_operator_cannot_administer(client, operator):
    login(client, operator.code)
    assert client.get('/admin/events').status_code == 403
    assert client.get('/voting/events').status_code == 200


def test_logout(admin_client):
    admin_client.post('/logout')
    assert admin_client.get('/admin/events').status_code == 403


def test_create_and_publish_event(admin_client):
    response = admin_client.post('/admin/events', json={
        'name': 'Fado: Final',
        'type': 'final',
        'category': 'fado',
        'location': 'Praça do Município',
        'start_date': '2025-06-29T21:00:00',
    })
    assert response.status_code == 201
    event_id = response.get_json()['data']['id']

    response = admin_client.post(f'/admin/events/{event_id}/publish')
    assert response.status_code == 200
    assert response.get_json()['message'] == 'Event published'
    assert response.get_json()['data']['status'] == 'published'


def test_illegal_transition_is_a_conflict(admin_client, make_event):
    event = make_event(status='completed')

    response = admin_client.post(f'/admin/events/{event.id}/start')

    assert response.status_code == 409
    assert response.get_json() == {
        'success': False,
        'error': 'Cannot start event with status "completed"',
        'code': 'invalid_transition',
    }


def test_cancel_with_reason(admin_client, make_event):
    event = make_event(status='published')
    response = admin_client.post(f'/admin/events/{event.id}/cancel', json={'reason': 'Rain'})
    assert response.get_json()['data']['notes'] == 'Cancelled: Rain'


def test_unknown_event_is_not_found(admin_client):
    assert admin_client.delete('/admin/events/321').status_code == 404


def test_register_participant_requires_id(admin_client, make_event):
    event = make_event()
    response = admin_client.post(f'/admin/events/{event.id}/participants', json={})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'participant_id is required'


def test_assign_judge(admin_client, make_event, make_judge):
    event = make_event()
    judge = make_judge()
    response = admin_client.post(f'/admin/events/{event.id}/judges', json={'judge_id': judge.id})
    assert response.status_code == 201
    assert response.get_json()['data']['judge_id'] == judge.id


def test_public_rankings(client, make_event, make_participant, make_judge, score):
    event = make_event(status='completed')
    judge = make_judge(event=event)
    score(event, judge, make_participant('Ana'), 90)

    response = client.get(f'/rankings/{event.id}')

    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['rankings'][0]['participant_name'] == 'Ana'
    assert data['rankings'][0]['average_score'] == 90
    assert client.get('/rankings').get_json()['data'][0]['top_participant'] == {'name': 'Ana', 'score': 90}
    assert client.get('/rankings/999').status_code == 404


def test_public_registration(client):
    response = client.post('/register', data={
        'name': 'Rita', 'email': 'rita@example.com', 'category': 'fado', 'experience': 'iniciante',
    })
    assert response.status_code == 201
    assert response.get_json()['data']['status'] == 'pending'


def test_operator_submits_evaluation(client, operator, make_event, make_participant, make_judge):
    event = make_event(status='ongoing')
    judge = make_judge(event=event)
    participant = make_participant()
    login(client, operator.code)

    session = client.post('/voting/sessions', json={'judge_id': judge.id, 'event_id': event.id}).get_json()
    response = client.post('/voting/evaluations', json={
        'event_id': event.id, 'judge_id': judge.id, 'participant_id': participant.id, 'score': 77,
    })

    assert response.status_code == 201
    assert response.get_json()['data']['session_id'] == session['data']['id']
    status = client.get(f'/voting/events/{event.id}/participants/{participant.id}/status').get_json()
    assert status['data']['is_complete'] is True
    assert client.post('/voting/evaluations', json={'score': 77}).status_code == 400


def test_active_session_route(client, operator, make_judge):
    judge = make_judge()
    login(client, operator.code)
    response = client.get(f'/voting/judges/{judge.id}/session')
    assert response.status_code == 200
    assert response.get_json()['data'] is None


def test_register_rejects_non_object_body(client):
    response = client.post('/register', json=[1, 2])
    assert response.status_code == 400
    assert response.get_json() == {
        'success': False,
        'error': 'Request body must be an object',
        'code': 'validation_error',
    }


def test_register_rejects_non_string_email(client):
    response = client.post('/register', json={
        'name': 'Rita', 'email': 12345, 'category': 'fado', 'experience': 'iniciante',
    })
    assert response.status_code == 400
    assert response.get_json()['error'] == 'email must be a non-empty string'


def test_public_event_registration_flow(client, make_event):
    event = make_event(status='published', start_date=datetime(2099, 6, 1, 21, 0), max_participants=10)

    listed = client.get('/registrations/events').get_json()['data']
    assert [(e['id'], e['registration_status'], e['can_register']) for e in listed] == [(event.id, 'open', True)]

    response = client.post('/registrations', json={
        'event_id': event.id, 'name': 'Rita', 'email': 'Rita@Example.com',
        'category': 'fado', 'experience': 'iniciante',
    })
    assert response.status_code == 201

    found = client.get('/registrations', query_string={'email': 'rita@example.com'}).get_json()['data']
    assert [(r['event_id'], r['participant_name'], r['status']) for r in found] == [(event.id, 'Rita', 'registered')]
    assert client.get('/registrations', query_string={'email': 'nobody@example.com'}).status_code == 404
    assert client.get('/registrations').status_code == 400
