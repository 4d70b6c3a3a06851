"""Library Circulation - Flask Application.

Fat Models, Skinny Controllers: routes read the form, call one model
method and redirect. Every expected failure is a ``LibraryError`` that the
error handler below turns into a plain-text response.
"""
import atexit
import logging
from typing import Any, Mapping, Optional

from flask import Flask, flash, g, redirect, request, session, url_for

from library_app.commands import register_commands
from library_app.config.config import Config
from library_app.errors import ConfigurationError, LibraryError, Unauthenticated
from library_app.models.database import close_db, get_db
from library_app.models.guest import Guest
from library_app.models.user import User
from library_app.routes import admin_bp, auth_bp, main_bp
from library_app.scheduled_tasks import shutdown_scheduler, start_scheduler
from library_app.seed import bootstrap
from library_app.utils.context import get_session_store

logger = logging.getLogger(__name__)


def create_app(test_config: Optional[Mapping[str, Any]] = None) -> Flask:
    """Application factory.

    Args:
        test_config: Overrides applied on top of ``Config``.

    Raises:
        ConfigurationError: no secret key was supplied.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    if not app.config.get('SECRET_KEY'):
        raise ConfigurationError('LIBRARY_SECRET_KEY must be set')
    app.config['PERMANENT_SESSION_LIFETIME'] = app.config['SESSION_LIFETIME']

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )

    app.teardown_appcontext(close_db)
    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(admin_bp)
    register_commands(app)

    # --- User Loader & Context Processors ---

    @app.before_request
    def load_logged_in_user():
        token = session.get('sid')
        identity = get_session_store().get(token) if token else None
        if identity is None and token:
            session.pop('sid', None)
        g.identity = identity
        g.user = User.from_session(identity) if identity else Guest()

    @app.context_processor
    def inject_context():
        return dict(current_user=g.get('user') or Guest())

    # --- Error handling ---

    @app.errorhandler(LibraryError)
    def handle_library_error(error: LibraryError):
        if isinstance(error, Unauthenticated):
            session.pop('sid', None)
            flash('Please login to access this page', 'warning')
            return redirect(url_for('auth.login'))
        if error.status_code >= 500:
            logger.error('%s %s failed: %s', request.method, request.path, error.message)
        else:
            logger.warning('%s %s rejected (%s): %s', request.method, request.path,
                           error.status_code, error.message)
        return error.message, error.status_code, {'Content-Type': 'text/plain; charset=utf-8'}

    # Initialize database
    with app.app_context():
        bootstrap(
            get_db(),
            reset=app.config['RESET_DB_ON_START'],
            seed=app.config['SEED_ON_START'],
            admin_username=app.config['ADMIN_USERNAME'],
            admin_password=app.config['ADMIN_PASSWORD']
        )

    # Start background tasks
    if app.config['SCHEDULER_ENABLED'] and not app.testing:
        start_scheduler(app)
        atexit.register(shutdown_scheduler)

    return app


def main():
    app = create_app()
    app.run(debug=False)


if __name__ == '__main__':
    main()
