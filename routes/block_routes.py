"""
Block and apartment routes
"""
from flask import Blueprint, current_app, jsonify

from routes.responses import failure_response, json_body

block_bp = Blueprint('block', __name__)


@block_bp.route('', methods=['GET'])
@block_bp.route('/', methods=['GET'])
def list_blocks():
    block_service = current_app.services.get('block')
    return jsonify({'blocks': block_service.list_blocks()})


@block_bp.route('', methods=['POST'])
@block_bp.route('/', methods=['POST'])
def create_block():
    """Create a block with generated apartments. Body: {"name", "apartment_count"}"""
    data = json_body()
    block_service = current_app.services.get('block')
    result = block_service.create_block(data.get('name'), data.get('apartment_count', 0))
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True, 'block': result.data}), 201


@block_bp.route('/<int:block_id>', methods=['GET'])
def get_block(block_id):
    block_service = current_app.services.get('block')
    result = block_service.get_block(block_id)
    if result.is_failure:
        return failure_response(result)
    return jsonify(result.data)


@block_bp.route('/<int:block_id>', methods=['PUT'])
def rename_block(block_id):
    block_service = current_app.services.get('block')
    result = block_service.rename_block(block_id, json_body().get('name'))
    if result.is_failure:
        return failure_response(result)
    return jsonify({
        'success': True,
        'block': result.data,
        'residents_updated': result.metadata.get('residents_updated', 0),
    })


@block_bp.route('/<int:block_id>', methods=['DELETE'])
def delete_block(block_id):
    block_service = current_app.services.get('block')
    result = block_service.delete_block(block_id)
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True})


@block_bp.route('/<int:block_id>/apartments', methods=['GET'])
def list_apartments(block_id):
    apartment_service = current_app.services.get('apartment')
    result = apartment_service.list_apartments(block_id)
    if result.is_failure:
        return failure_response(result)
    return jsonify({'apartments': result.data})


@block_bp.route('/<int:block_id>/apartments', methods=['POST'])
def create_apartment(block_id):
    data = json_body()
    apartment_service = current_app.services.get('apartment')
    result = apartment_service.create_apartment(
        block_id,
        str(data.get('number') or ''),
        floor=data.get('floor')
    )
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True, 'apartment': result.data}), 201


@block_bp.route('/apartments/<int:apartment_id>', methods=['DELETE'])
def delete_apartment(apartment_id):
    apartment_service = current_app.services.get('apartment')
    result = apartment_service.delete_apartment(apartment_id)
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True})
