"""
Static frontend serving.

Files under the web directory are served as-is; any other path that does
not look like a file gets index.html so client-side routing works.
"""

import os

from flask import Blueprint, abort, current_app, send_from_directory

frontend_bp = Blueprint('frontend', __name__)


@frontend_bp.route('/', defaults={'path': ''})
@frontend_bp.route('/<path:path>')
def serve(path: str):
    web_dir = current_app.config.get('WEB_DIR')
    if not web_dir or path.startswith('api/'):
        abort(404)

    if '.' in os.path.basename(path):
        return send_from_directory(web_dir, path)
    return send_from_directory(web_dir, 'index.html')
