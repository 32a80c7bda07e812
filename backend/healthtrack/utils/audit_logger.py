"""
Audit trail for access to health data.
Every read or write of readings, profile or assistant history is logged as a
JSON event with timestamp, user, action and resource.
"""
import os
import logging
import structlog
from datetime import datetime, timezone
from flask import current_app, has_request_context, request, g
from functools import wraps


def setup_audit_logging(app):
    """Configure structlog JSON output and the audit file handler."""

    log_file = app.config.get('AUDIT_LOG_FILE') or 'logs/audit.log'
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    audit_logger = logging.getLogger('audit')
    audit_logger.setLevel(logging.INFO)

    # create_app may run several times per process (tests); one handler per file
    target = os.path.abspath(log_file)
    if not any(getattr(h, 'baseFilename', None) == target for h in audit_logger.handlers):
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter('%(message)s'))
        audit_logger.addHandler(file_handler)

    app.config['AUDIT_LOGGER'] = structlog.get_logger('audit')


def get_audit_logger():
    return current_app.config.get('AUDIT_LOGGER') or structlog.get_logger('audit')


def audit_log(action: str, resource_type: str, resource_id: str = None,
              details: dict = None, user_id: str = None):
    """
    Log an audit event.

    Args:
        action: The action performed (CREATE, READ, UPDATE, ANALYZE, ...)
        resource_type: Type of resource accessed (blood_sugar_reading, profile, ...)
        resource_id: ID of the specific resource (optional)
        details: Additional details about the action (optional)
        user_id: ID of the acting user (optional, uses g.user_id if not provided)
    """
    logger = get_audit_logger()

    if user_id is None:
        user_id = getattr(g, 'user_id', 'anonymous')

    if has_request_context():
        client_ip = request.remote_addr or 'unknown'
        user_agent = request.headers.get('User-Agent', 'unknown')
    else:
        client_ip = user_agent = 'unknown'

    logger.info(
        "audit_event",
        timestamp=datetime.now(timezone.utc).isoformat(),
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        user_id=user_id,
        client_ip=client_ip,
        user_agent=user_agent,
        details=details or {},
    )


def audit_phi_access(action: str, resource_type: str):
    """
    Decorator to log access to a route's resource before the view runs.
    Works for sync and async views.
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            resource_id = kwargs.get('reading_id') or kwargs.get('user_id')
            audit_log(action, resource_type, resource_id=str(resource_id) if resource_id else None)
            return current_app.ensure_sync(f)(*args, **kwargs)
        return wrapper
    return decorator
