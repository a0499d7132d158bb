"""
Dashboard routes
"""
from flask import Blueprint, current_app, jsonify, request

from routes.responses import failure_response

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('', methods=['GET'])
@dashboard_bp.route('/', methods=['GET'])
def dashboard():
    """Totals and collection figures for ?month=&year= (default: current month)"""
    dashboard_service = current_app.services.get('dashboard')
    result = dashboard_service.get_dashboard_stats(
        month=request.args.get('month') or None,
        year=request.args.get('year') or None
    )
    if result.is_failure:
        return failure_response(result)
    return jsonify(result.data)
