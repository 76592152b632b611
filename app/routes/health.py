# app/routes/health.py
from flask import Blueprint, jsonify

bp = Blueprint('health', __name__)


@bp.route('/health', methods=['GET'])
def health():
    """Health-check simples"""
    return jsonify({'status': 'ok'})
