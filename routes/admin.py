# routes/admin.py
# Administration API: events and their lifecycle, participants, judges, logs

from flask import Blueprint, request

from guards import admin_required
from routes.responses import int_value, payload, respond
from services import dashboard, evaluations, events, judges, logs, participants

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')

LIFECYCLE_OPERATIONS = {
    'publish': events.publish_event,
    'start': events.start_event,
    'complete': events.complete_event,
    'revert': events.revert_to_draft,
}


# --- Events ---
@admin_bp.route('/events', methods=['GET'])
@admin_required
def list_events():
    return respond(events.list_events())


@admin_bp.route('/events', methods=['POST'])
@admin_required
def create_event():
    return respond(events.create_event(payload()), success_status=201)


@admin_bp.route('/events/<int:event_id>', methods=['GET'])
@admin_required
def get_event(event_id):
    return respond(events.get_event(event_id))


@admin_bp.route('/events/<int:event_id>', methods=['PATCH'])
@admin_required
def update_event(event_id):
    return respond(events.update_event(event_id, payload()))


@admin_bp.route('/events/<int:event_id>', methods=['DELETE'])
@admin_required
def delete_event(event_id):
    return respond(events.delete_event(event_id))


@admin_bp.route('/events/<int:event_id>/<any(publish, start, complete, revert):operation>', methods=['POST'])
@admin_required
def transition_event(event_id, operation):
    return respond(LIFECYCLE_OPERATIONS[operation](event_id))


@admin_bp.route('/events/<int:event_id>/cancel', methods=['POST'])
@admin_required
def cancel_event(event_id):
    return respond(events.cancel_event(event_id, reason=payload().get('reason')))


@admin_bp.route('/events/<int:event_id>/publish-results', methods=['POST'])
@admin_required
def publish_results(event_id):
    return respond(evaluations.publish_event_results(event_id))


@admin_bp.route('/events/<int:event_id>/evaluation-stats', methods=['GET'])
@admin_required
def evaluation_stats(event_id):
    return respond(evaluations.get_event_evaluation_stats(event_id))


# --- Registrations and judge assignments ---
@admin_bp.route('/events/<int:event_id>/participants', methods=['GET'])
@admin_required
def event_participants(event_id):
    return respond(participants.list_event_participants(event_id))


@admin_bp.route('/events/<int:event_id>/participants', methods=['POST'])
@admin_required
def register_participant(event_id):
    participant_id = int_value(payload(), 'participant_id')
    return respond(participants.register_participant_in_event(event_id, participant_id), success_status=201)


@admin_bp.route('/events/<int:event_id>/participants/<int:participant_id>', methods=['DELETE'])
@admin_required
def remove_participant(event_id, participant_id):
    return respond(participants.remove_participant_from_event(event_id, participant_id))


@admin_bp.route('/events/<int:event_id>/judges', methods=['GET'])
@admin_required
def event_judges(event_id):
    return respond(judges.list_event_judges(event_id))


@admin_bp.route('/events/<int:event_id>/judges', methods=['POST'])
@admin_required
def assign_judge(event_id):
    return respond(judges.add_judge_to_event(event_id, int_value(payload(), 'judge_id')), success_status=201)


@admin_bp.route('/events/<int:event_id>/judges/<int:judge_id>', methods=['DELETE'])
@admin_required
def unassign_judge(event_id, judge_id):
    return respond(judges.remove_judge_from_event(event_id, judge_id))


# --- Participants ---
@admin_bp.route('/participants', methods=['GET'])
@admin_required
def approved_participants():
    return respond(participants.list_approved_participants())


@admin_bp.route('/participants/<int:participant_id>/approve', methods=['POST'])
@admin_required
def approve_participant(participant_id):
    return respond(participants.approve_participant(participant_id))


@admin_bp.route('/participants/<int:participant_id>/reject', methods=['POST'])
@admin_required
def reject_participant(participant_id):
    return respond(participants.reject_participant(participant_id, reason=payload().get('reason')))


@admin_bp.route('/participants/<int:participant_id>/archive', methods=['POST'])
@admin_required
def archive_participant(participant_id):
    return respond(participants.archive_participant(participant_id))


# --- Judges ---
@admin_bp.route('/judges', methods=['GET'])
@admin_required
def list_judges():
    return respond(judges.list_judges(active_only=request.args.get('active') == '1'))


@admin_bp.route('/judges', methods=['POST'])
@admin_required
def create_judge():
    return respond(judges.create_judge(payload()), success_status=201)


@admin_bp.route('/judges/<int:judge_id>', methods=['PATCH'])
@admin_required
def update_judge(judge_id):
    return respond(judges.update_judge(judge_id, payload()))


@admin_bp.route('/judges/<int:judge_id>/deactivate', methods=['POST'])
@admin_required
def deactivate_judge(judge_id):
    return respond(judges.deactivate_judge(judge_id))


# --- Logs and dashboard ---
@admin_bp.route('/logs', methods=['GET'])
@admin_required
def list_logs():
    return respond(logs.list_event_logs(
        event_id=request.args.get('event_id', type=int),
        severity=request.args.get('severity'),
        limit=request.args.get('limit', default=100, type=int),
    ))


@admin_bp.route('/logs/stats', methods=['GET'])
@admin_required
def log_stats():
    return respond(logs.get_log_stats())


@admin_bp.route('/dashboard', methods=['GET'])
@admin_required
def dashboard_stats():
    return respond(dashboard.get_dashboard_stats())
