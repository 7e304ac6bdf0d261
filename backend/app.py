# app.py
from flask import Flask, jsonify, request, Blueprint
from flask_cors import CORS
from sqlalchemy import text
import os
import logging
from dotenv import load_dotenv
import importlib
from datetime import datetime

from extensions import db, migrate

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

API_PREFIX = '/api'

# (module, blueprint attribute, url segment)
BLUEPRINTS = [
    ('classes', 'classes_bp', 'classes'),
    ('students', 'students_bp', 'students'),
    ('teachers', 'teachers_bp', 'teachers'),
    ('subjects', 'subjects_bp', 'subjects'),
    ('teacher_assignments', 'teacher_assignments_bp', 'teacher-assignments'),
]


def configure_logging(level_name=None):
    """Configure root logging once; LOG_LEVEL overrides the INFO default"""
    level_name = (level_name or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )


def get_database_uri():
    """Get database URI with PostgreSQL URL support"""
    db_url = os.environ.get("DATABASE_URL")

    if db_url:
        if db_url.startswith("postgres://"):
            db_url = db_url.replace("postgres://", "postgresql://", 1)
        logger.info("[DB] Using %s", db_url.split('://')[0])
        return db_url

    logger.info("[DB] Using SQLite (local development)")
    return "sqlite:///student_management.db"


def register_blueprints(app):
    """Register every resource blueprint under /api/<resource>"""
    logger.info("[INIT] Registering blueprints")

    registered_count = 0

    for module_name, bp_name, segment in BLUEPRINTS:
        try:
            module = importlib.import_module(f'routes.{module_name}')
            blueprint = getattr(module, bp_name)

            if not isinstance(blueprint, Blueprint):
                logger.error("[ERR] %s is not a Blueprint object", bp_name)
                continue

            app.register_blueprint(blueprint, url_prefix=f'{API_PREFIX}/{segment}')
            registered_count += 1
            logger.info("[OK] Registered '%s' at %s/%s", blueprint.name, API_PREFIX, segment)

        except ImportError:
            logger.exception("[ERR] Cannot import routes.%s", module_name)
        except AttributeError:
            logger.exception("[ERR] No '%s' found in routes.%s", bp_name, module_name)

    if registered_count < len(BLUEPRINTS):
        logger.warning(
            "[WARN] Only %s/%s blueprints registered", registered_count, len(BLUEPRINTS)
        )
    else:
        logger.info("[OK] All %s blueprints registered", registered_count)


def setup_database(app):
    """Create tables for every model; migrations stay available via `flask db`"""
    with app.app_context():
        # Import all models to ensure they're registered
        import models  # noqa: F401

        db.create_all()
        logger.info("[OK] Database tables ensured")


def create_app(test_config=None):
    """Create and configure the Flask application"""
    configure_logging()

    app = Flask(__name__)

    # /api/students and /api/students/ reach the same handler
    app.url_map.strict_slashes = False

    # ============ CONFIGURATION ============
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'student-management-dev-key')
    app.config['SQLALCHEMY_DATABASE_URI'] = get_database_uri()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {
        'pool_recycle': 300,
        'pool_pre_ping': True,
    }
    app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024  # 1MB
    app.config['CORS_ORIGINS'] = os.environ.get('CORS_ORIGINS', '*')

    # Debug mode based on environment
    app.config['DEBUG'] = os.environ.get('FLASK_ENV') == 'development'

    if test_config:
        app.config.update(test_config)

    # ============ INITIALIZE EXTENSIONS ============
    db.init_app(app)
    migrate.init_app(app, db)
    CORS(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})

    # ============ SETUP DATABASE ============
    setup_database(app)

    # ============ REGISTER BLUEPRINTS ============
    register_blueprints(app)

    # ============ BASIC ROUTES ============
    @app.route('/')
    def home():
        """API home page"""
        return jsonify({
            'service': 'Student Management API',
            'version': '1.0.0',
            'status': 'active',
            'timestamp': datetime.utcnow().isoformat(),
            'endpoints': {
                segment: f'{API_PREFIX}/{segment}'
                for _, _, segment in BLUEPRINTS
            }
        })

    @app.route('/health')
    def health():
        """Health check endpoint"""
        try:
            db.session.execute(text('SELECT 1'))
            db_status = 'connected'
        except Exception as e:
            db.session.rollback()
            logger.error("[DB] Health check failed: %s", e)
            db_status = f'error: {str(e)}'

        return jsonify({
            'success': db_status == 'connected',
            'status': 'healthy' if db_status == 'connected' else 'degraded',
            'timestamp': datetime.utcnow().isoformat(),
            'database': db_status,
            'registered_blueprints': list(app.blueprints.keys())
        })

    # ============ ERROR HANDLERS ============
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'error': f'The requested endpoint {request.path} does not exist.'
        }), 404

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({
            'success': False,
            'error': getattr(error, 'description', str(error))
        }), 400

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'error': f'The method {request.method} is not allowed for this endpoint.'
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error("Internal Server Error on %s: %s", request.path, error)
        db.session.rollback()
        return jsonify({
            'success': False,
            'error': 'An unexpected error occurred on the server.'
        }), 500

    return app


# ============ MAIN ENTRY POINT ============
if __name__ == '__main__':
    application = create_app()
    port = int(os.environ.get('PORT', 3000))
    debug = application.config['DEBUG']

    logger.info("[START] Student Management API on http://localhost:%s (debug=%s)", port, debug)
    application.run(host='0.0.0.0', port=port, debug=debug)
