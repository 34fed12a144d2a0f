from flask import Flask
from flask_cors import CORS
import os
import sys

from core.config import load_config
from core.logger import logger


def resolve_cors_origins(cors_origins=None):
    """CORS origins from the argument or CORS_ORIGINS; no wildcard default"""
    if cors_origins is None:
        cors_origins = os.getenv('CORS_ORIGINS', '')
    if not cors_origins:
        # In development, allow localhost if CORS_ORIGINS not set
        if '--dev' in sys.argv or os.getenv('FLASK_ENV') == 'development':
            logger.warning("Using default CORS origins for development. Set CORS_ORIGINS in production!")
            return 'http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173'
        raise ValueError("CORS_ORIGINS environment variable must be set in production")
    return cors_origins


def create_app(service=None, cors_origins=None):
    """
    Build the Flask app.

    When no ClassroomService is given, Firebase is initialized from the
    environment (see core.config).
    """
    from api.routes import api
    from classpoints.bootstrap import init_firebase
    from classpoints.service import ClassroomService

    if service is None:
        service = ClassroomService(init_firebase(load_config()))

    app = Flask(__name__)
    app.config['CLASSROOM_SERVICE'] = service
    app.config['FIREBASE_APP'] = service.context.app

    CORS(app, origins=resolve_cors_origins(cors_origins).split(','))

    # Register blueprints
    app.register_blueprint(api, url_prefix='/api')

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return {'status': 'ok', 'message': 'Backend is running'}, 200

    @app.route('/', methods=['GET'])
    def root():
        """Root endpoint"""
        return {'status': 'ok', 'message': 'Classroom Points API'}, 200

    return app


if __name__ == '__main__':
    app = create_app()
    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    app.run(host='0.0.0.0', port=port, debug=debug)
