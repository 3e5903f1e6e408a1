# routes/responses.py
# Turns service results into JSON responses

from flask import jsonify, request

from errors import ValidationError

STATUS_CODES = {
    'not_found': 404,
    'invalid_transition': 409,
    'validation_error': 400,
    'data_access_error': 500,
    'forbidden': 403,
}


def to_json(value):
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    return value


def respond(result, success_status=200):
    if result.success:
        return jsonify(result.to_dict(serialize=to_json)), success_status
    return jsonify(result.to_dict()), STATUS_CODES.get(result.error.code, 400)


def payload():
    """Request body as a dict, from JSON or a submitted form."""
    if request.is_json:
        data = request.get_json(silent=True)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValidationError('Request body must be an object')
        return data
    return request.form.to_dict()


def int_value(data, name):
    """Integer field of a request body; raises ValidationError if absent or malformed."""
    value = data.get(name)
    if value is None or value == '' or isinstance(value, bool):
        raise ValidationError(f'{name} is required')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an integer')
