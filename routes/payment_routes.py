"""
Payment routes
"""
from flask import Blueprint, current_app, jsonify, request

from routes.responses import failure_response, json_body

payment_bp = Blueprint('payment', __name__)


@payment_bp.route('', methods=['GET'])
@payment_bp.route('/', methods=['GET'])
def list_payments():
    """List payments filtered by ?block=&year=&month=&status="""
    payment_service = current_app.services.get('payment')
    payments = payment_service.list_payments(
        block_number=request.args.get('block') or None,
        year=request.args.get('year') or None,
        month=request.args.get('month') or None,
        status=request.args.get('status') or None
    )
    return jsonify({'payments': payments})


@payment_bp.route('', methods=['POST'])
@payment_bp.route('/', methods=['POST'])
def add_payment():
    payment_service = current_app.services.get('payment')
    result = payment_service.add_payment(json_body())
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True, 'payment': result.data}), 201


@payment_bp.route('/<int:payment_id>', methods=['PUT'])
def update_payment(payment_id):
    payment_service = current_app.services.get('payment')
    result = payment_service.update_payment(payment_id, json_body())
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True, 'payment': result.data})


@payment_bp.route('/<int:payment_id>/toggle-status', methods=['POST'])
def toggle_payment_status(payment_id):
    payment_service = current_app.services.get('payment')
    result = payment_service.toggle_payment_status(payment_id)
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True, 'status': result.data['status']})


@payment_bp.route('/<int:payment_id>', methods=['DELETE'])
def delete_payment(payment_id):
    payment_service = current_app.services.get('payment')
    result = payment_service.delete_payment(payment_id)
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True})
