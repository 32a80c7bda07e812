import os
import logging
import click
from flask import Flask, request, redirect, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()
migrate = Migrate()

logger = logging.getLogger(__name__)


def create_app(test_config=None):
    app = Flask(__name__)

    is_production = os.getenv('FLASK_ENV') == 'production'

    app.config.update(
        SECRET_KEY=os.getenv('SECRET_KEY'),
        SQLALCHEMY_DATABASE_URI=os.getenv('DATABASE_URL'),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        SQLALCHEMY_ENGINE_OPTIONS={
            'pool_pre_ping': True,
            'pool_recycle': 300,
        },
        # Request size limit (1 MB)
        MAX_CONTENT_LENGTH=1 * 1024 * 1024,
        OPENAI_API_KEY=os.getenv('OPENAI_API_KEY', ''),
        OPENAI_BASE_URL=os.getenv('OPENAI_BASE_URL') or None,
        OPENAI_MODEL=os.getenv('OPENAI_MODEL', 'gpt-4o'),
        AI_ANALYSIS_TIMEOUT_SECONDS=float(os.getenv('AI_ANALYSIS_TIMEOUT_SECONDS', 50)),
        REQUEST_TIMEOUT_SECONDS=float(os.getenv('REQUEST_TIMEOUT_SECONDS', 55)),
        AUDIT_LOG_FILE=os.getenv('AUDIT_LOG_FILE', 'logs/audit.log'),
    )
    if test_config:
        app.config.update(test_config)

    # Require SECRET_KEY, no insecure fallback
    if not app.config['SECRET_KEY']:
        raise RuntimeError('SECRET_KEY environment variable is required')

    database_url = app.config['SQLALCHEMY_DATABASE_URI']
    if not database_url:
        raise RuntimeError('DATABASE_URL environment variable is required')

    # In production, require PostgreSQL
    if is_production and not database_url.startswith('postgresql'):
        raise RuntimeError(
            'PostgreSQL is required in production. '
            'DATABASE_URL must start with postgresql://'
        )

    if database_url.startswith('sqlite'):
        # pool_recycle / pre_ping are meaningless for SQLite
        app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {}

    if not app.config['OPENAI_API_KEY']:
        logger.warning('OPENAI_API_KEY is not set. AI analysis will use fallback results.')

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # CORS: restrict origins
    allowed_origins = os.getenv('ALLOWED_ORIGINS', '')
    if allowed_origins:
        origins_list = [o.strip() for o in allowed_origins.split(',') if o.strip()]
    elif is_production:
        raise RuntimeError(
            'ALLOWED_ORIGINS environment variable is required in production'
        )
    else:
        # Development: allow localhost variants
        origins_list = [
            'http://localhost:*',
            'http://127.0.0.1:*',
        ]

    CORS(app, resources={
        r"/api/*": {"origins": origins_list},
    })

    # Redirect HTTP to HTTPS in production
    if is_production:
        @app.before_request
        def enforce_https():
            if not request.is_secure and request.headers.get('X-Forwarded-Proto', 'http') != 'https':
                url = request.url.replace('http://', 'https://', 1)
                return redirect(url, code=301)

    # Security headers
    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"
        response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate'
        response.headers['Referrer-Policy'] = 'no-referrer'
        if is_production or request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    # Validate Content-Type on writes (CSRF-like protection for API)
    @app.before_request
    def validate_content_type():
        if request.method in ('POST', 'PUT', 'PATCH') and request.path != '/health':
            content_type = request.content_type or ''
            if 'application/json' not in content_type:
                return jsonify({'message': 'Content-Type must be application/json'}), 415

    # Setup audit logging
    from healthtrack.utils.audit_logger import setup_audit_logging
    setup_audit_logging(app)

    # Register blueprints
    from healthtrack.routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix='/api')

    # Health check endpoint
    @app.route('/health')
    def health():
        return {'status': 'healthy'}, 200

    @app.cli.command('cleanup-chat-history')
    @click.option('--days', default=90, show_default=True, type=int,
                  help='Keep exchanges newer than this many days.')
    def cleanup_chat_history(days):
        """Remove assistant chat history older than --days."""
        from healthtrack.models.chat_history import AIChatHistory
        count = AIChatHistory.cleanup_older_than(days=days)
        print(f'Removed {count} chat history entry/entries.')

    return app
