"""
Helpers shared by the JSON blueprints
"""
from flask import jsonify, request

ERROR_STATUS = {
    'VALIDATION_ERROR': 400,
    'INVALID_FILE': 400,
    'UNREADABLE_FILE': 400,
    'EMPTY_FILE': 400,
    'NOT_FOUND': 404,
    'LOCATION_OCCUPIED': 409,
    'DUPLICATE': 409,
    'IN_PROGRESS': 409,
    'REPOSITORY_ERROR': 500,
}


def failure_response(result):
    """JSON error body for a failed Result, status chosen by its error code"""
    body = {'success': False, 'error': result.error, 'code': result.error_code}
    if result.metadata:
        body['details'] = result.metadata
    return jsonify(body), ERROR_STATUS.get(result.error_code, 400)


def json_body():
    """Request JSON as a dict; missing or malformed bodies become {}"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
