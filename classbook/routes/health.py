# Health check endpoint for monitoring

from flask import Blueprint, jsonify
from datetime import datetime
from sqlalchemy import text
from classbook import db
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('health', __name__)

@bp.route('/health')
def health_check():
    """Database connectivity check"""

    health_status = {
        'status': 'healthy',
        'timestamp': datetime.utcnow().isoformat(),
        'version': '1.0.0',
        'checks': {}
    }

    try:
        db.session.execute(text('SELECT 1'))
        health_status['checks']['database'] = 'healthy'
    except Exception as e:
        logger.error(f"Health check database failure: {e}")
        db.session.rollback()
        health_status['checks']['database'] = f'unhealthy: {str(e)}'
        health_status['status'] = 'unhealthy'

    return jsonify(health_status), 200 if health_status['status'] == 'healthy' else 503
