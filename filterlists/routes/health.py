"""
Health route — corpus status for load balancers and deploy checks.
"""
from flask import Blueprint, current_app, jsonify

bp = Blueprint('health', __name__)


@bp.route('/health')
def health():
    corpus = current_app.extensions['filterlists'].corpus
    return jsonify({
        'status': 'ok',
        'filters': len(corpus),
        'fingerprint': corpus.fingerprint,
    })
