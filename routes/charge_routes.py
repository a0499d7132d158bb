"""
Charge routes
"""
from flask import Blueprint, current_app, jsonify, request

from routes.responses import failure_response, json_body

charge_bp = Blueprint('charge', __name__)


@charge_bp.route('', methods=['GET'])
@charge_bp.route('/', methods=['GET'])
def list_charges():
    """List charges, optionally only one category (?category=In|Out)"""
    charge_service = current_app.services.get('charge')
    return jsonify({'charges': charge_service.list_charges(request.args.get('category') or None)})


@charge_bp.route('', methods=['POST'])
@charge_bp.route('/', methods=['POST'])
def create_charge():
    charge_service = current_app.services.get('charge')
    result = charge_service.create_charge(json_body())
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True, 'charge': result.data}), 201


@charge_bp.route('/<int:charge_id>', methods=['GET'])
def get_charge(charge_id):
    charge_service = current_app.services.get('charge')
    result = charge_service.get_charge(charge_id)
    if result.is_failure:
        return failure_response(result)
    return jsonify(result.data)


@charge_bp.route('/<int:charge_id>', methods=['PUT'])
def update_charge(charge_id):
    charge_service = current_app.services.get('charge')
    result = charge_service.update_charge(charge_id, json_body())
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True, 'charge': result.data})


@charge_bp.route('/<int:charge_id>', methods=['DELETE'])
def delete_charge(charge_id):
    charge_service = current_app.services.get('charge')
    result = charge_service.delete_charge(charge_id)
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True})
