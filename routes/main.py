# routes/main.py
# Public pages (rankings, registration) and the operators' voting API

from flask import Blueprint, request

from guards import operator_required
from routes.responses import payload, respond
from services import evaluations, events, participants, rankings, sessions

main_bp = Blueprint('main', __name__)


# --- Public ---
@main_bp.route('/events', methods=['GET'])
def published_events():
    return respond(events.list_published_events())


@main_bp.route('/rankings', methods=['GET'])
def all_rankings():
    return respond(rankings.get_all_event_rankings())


@main_bp.route('/rankings/<int:event_id>', methods=['GET'])
def event_ranking(event_id):
    return respond(rankings.get_event_ranking(event_id))


@main_bp.route('/register', methods=['POST'])
def register():
    return respond(participants.create_participant(payload()), success_status=201)


@main_bp.route('/registrations/events', methods=['GET'])
def registration_events():
    return respond(participants.available_events())


@main_bp.route('/registrations', methods=['POST'])
def register_for_event():
    return respond(participants.register_for_event(payload()), success_status=201)


@main_bp.route('/registrations', methods=['GET'])
def registrations_by_email():
    return respond(participants.get_registrations_by_email(
        request.args.get('email'),
        event_id=request.args.get('event_id', type=int),
    ))


# --- Voting (operators and admins) ---
@main_bp.route('/voting/events', methods=['GET'])
@operator_required
def voting_events():
    return respond(events.list_active_events())


@main_bp.route('/voting/events/<int:event_id>/participants', methods=['GET'])
@operator_required
def voting_sheet(event_id):
    return respond(evaluations.get_event_participants_with_evaluations(event_id))


@main_bp.route('/voting/events/<int:event_id>/evaluations', methods=['GET'])
@operator_required
def event_evaluations(event_id):
    return respond(evaluations.list_event_evaluations(event_id))


@main_bp.route('/voting/events/<int:event_id>/participants/<int:participant_id>/evaluations', methods=['GET'])
@operator_required
def participant_evaluations(event_id, participant_id):
    return respond(evaluations.list_participant_evaluations(participant_id, event_id))


@main_bp.route('/voting/events/<int:event_id>/participants/<int:participant_id>/status', methods=['GET'])
@operator_required
def participant_status(event_id, participant_id):
    return respond(evaluations.check_participant_evaluation_status(event_id, participant_id))


@main_bp.route('/voting/evaluations', methods=['POST'])
@operator_required
def submit_evaluation():
    return respond(evaluations.submit_evaluation(payload()), success_status=201)


@main_bp.route('/voting/sessions', methods=['POST'])
@operator_required
def start_session():
    data = payload()
    return respond(
        sessions.start_session(data.get('judge_id'), data.get('event_id'), session_name=data.get('session_name')),
        success_status=201,
    )


@main_bp.route('/voting/sessions/<int:session_id>/end', methods=['POST'])
@operator_required
def end_session(session_id):
    return respond(sessions.end_session(session_id))


@main_bp.route('/voting/judges/<int:judge_id>/session', methods=['GET'])
@operator_required
def active_session(judge_id):
    return respond(sessions.get_active_session(judge_id))
