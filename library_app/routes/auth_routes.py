"""Authentication routes for the library circulation system.

This module handles user authentication including login, registration
and logout.
"""
from flask import (
    Blueprint,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for
)

from library_app.models.database import get_db
from library_app.models.user import User
from library_app.utils.context import get_session_store

# Create authentication blueprint
auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Handle user login.

    GET: Display login form.
    POST: Check credentials and open a server-side session.

    Returns:
        Rendered template or redirect response.
    """
    if request.method == 'POST':
        user = User.authenticate(
            get_db(),
            request.form.get('username', ''),
            request.form.get('password', '')
        )
        store = get_session_store()
        store.destroy(session.get('sid'))
        context = store.create(user)

        session.clear()
        session['sid'] = context.token
        session.permanent = True

        flash(f'Welcome back, {user.username}!', 'success')
        return redirect(url_for('main.index'))

    return render_template('pages/login.html')


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    """Handle new member registration.

    GET: Display registration form.
    POST: Create new member account.

    Returns:
        Rendered template or redirect response.
    """
    if request.method == 'POST':
        User.register(
            get_db(),
            request.form.get('username', ''),
            request.form.get('password', '')
        )
        flash('Registration successful! Please login.', 'success')
        return redirect(url_for('auth.login'))

    return render_template('pages/register.html')


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Revoke the session and go back to the login page."""
    get_session_store().destroy(session.get('sid'))
    session.clear()
    flash('You have been logged out successfully', 'success')
    return redirect(url_for('auth.login'))
