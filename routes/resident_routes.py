"""
Resident routes: CRUD, CSV import/export and import follow-ups
"""
from flask import Blueprint, Response, current_app, jsonify, request

from logging_config import get_logger
from routes.responses import failure_response, json_body

logger = get_logger(__name__)

resident_bp = Blueprint('resident', __name__)


@resident_bp.route('', methods=['GET'])
@resident_bp.route('/', methods=['GET'])
def list_residents():
    """Paginated resident list, filterable by block and search text"""
    resident_service = current_app.services.get('resident')
    result = resident_service.list_residents(
        page=request.args.get('page', 1, type=int),
        per_page=request.args.get('per_page', 50, type=int),
        block_number=request.args.get('block') or None,
        search=request.args.get('search') or None
    )
    return jsonify({
        'residents': result.data,
        'total': result.total,
        'page': result.page,
        'per_page': result.per_page,
        'total_pages': result.total_pages,
    })


@resident_bp.route('', methods=['POST'])
@resident_bp.route('/', methods=['POST'])
def add_resident():
    resident_service = current_app.services.get('resident')
    result = resident_service.add_resident(json_body())
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True, 'resident': result.data.to_dict()}), 201


@resident_bp.route('', methods=['DELETE'])
@resident_bp.route('/', methods=['DELETE'])
def delete_all_residents():
    """Delete every resident; requires ?confirm=true"""
    if request.args.get('confirm') != 'true':
        return jsonify({'success': False, 'error': 'Pass confirm=true to delete all residents'}), 400
    resident_service = current_app.services.get('resident')
    result = resident_service.delete_all_residents()
    if result.is_failure:
        return failure_response(result)
    current_app.services.get('property_cache').clear()
    return jsonify({'success': True, 'deleted': result.data})


@resident_bp.route('/<int:resident_id>', methods=['GET'])
def get_resident(resident_id):
    resident_service = current_app.services.get('resident')
    result = resident_service.get_resident(resident_id)
    if result.is_failure:
        return failure_response(result)
    return jsonify(result.data.to_dict())


@resident_bp.route('/<int:resident_id>', methods=['PUT'])
def update_resident(resident_id):
    resident_service = current_app.services.get('resident')
    result = resident_service.update_resident(resident_id, json_body())
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True, 'resident': result.data.to_dict()})


@resident_bp.route('/<int:resident_id>', methods=['DELETE'])
def delete_resident(resident_id):
    resident_service = current_app.services.get('resident')
    result = resident_service.delete_resident(resident_id)
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True})


@resident_bp.route('/import', methods=['POST'])
def import_residents():
    """Import residents from an uploaded CSV/TSV file (form field "file")"""
    uploaded = request.files.get('file')
    if uploaded is None or not uploaded.filename:
        return jsonify({'success': False, 'error': 'No file uploaded', 'code': 'INVALID_FILE'}), 400

    import_service = current_app.services.get('resident_import')
    result = import_service.import_file(uploaded.filename, uploaded.read())
    if result.is_failure:
        logger.warning("Resident import rejected", filename=uploaded.filename, error=result.error)
        return failure_response(result)

    summary = result.data
    return jsonify({'success': summary.successful > 0 or summary.failed == 0, **summary.to_dict()})


@resident_bp.route('/import/history', methods=['GET'])
def import_history():
    import_service = current_app.services.get('resident_import')
    limit = request.args.get('limit', 10, type=int)
    return jsonify({'imports': import_service.get_import_history(limit)})


@resident_bp.route('/import/missing-apartments', methods=['POST'])
def create_missing_apartments():
    """
    Create apartments reported missing by an import.

    Body: {"block": "A", "apartments": ["12", "14"]} or {"errors": [...]} with
    the error list returned by the import.
    """
    data = json_body()
    gap_service = current_app.services.get('apartment_gap')

    if data.get('errors'):
        results = gap_service.create_from_errors(data['errors'])
        if not results:
            return jsonify({'success': False, 'error': 'No missing apartments found in errors'}), 400
        return jsonify({
            'success': all(result.is_success for result in results),
            'results': [result.data if result.is_success else {'error': result.error, 'code': result.error_code}
                        for result in results],
        })

    block_name = (data.get('block') or '').strip()
    if not block_name:
        return jsonify({'success': False, 'error': 'Block is required', 'code': 'VALIDATION_ERROR'}), 400

    result = gap_service.create_missing(block_name, data.get('apartments') or [])
    if result.is_failure:
        return failure_response(result)
    return jsonify({'success': True, **result.data}), 201


@resident_bp.route('/export', methods=['GET'])
def export_residents():
    resident_service = current_app.services.get('resident')
    result = resident_service.export_csv()
    if result.is_failure:
        return failure_response(result)

    filename, content = result.data
    return Response(
        content,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )
