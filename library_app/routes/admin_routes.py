"""Admin catalog management routes.

This module handles admin-only operations: the dashboard, adding, editing
and deleting books.
"""
from flask import Blueprint, flash, g, redirect, render_template, request, url_for

from library_app.models.database import get_db
from library_app.models.system_log import SystemLog
from library_app.utils.context import get_circulation
from library_app.utils.decorators import login_required, role_required

# Create admin blueprint
admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


@admin_bp.route('')
@login_required
@role_required('admin')
def dashboard():
    """Display admin dashboard with catalog statistics and recent activity.

    Returns:
        Rendered admin dashboard template.
    """
    return render_template(
        'pages/admin/dashboard.html',
        stats=get_circulation().get_stats(),
        logs=SystemLog.get_recent(get_db(), 20),
        user=g.user
    )


@admin_bp.route('/addbook', methods=['GET', 'POST'])
@login_required
@role_required('admin')
def add_book():
    """Add a book to the catalog.

    Form data:
        title: Book title (required).
        author: Book author (required).
    """
    if request.method == 'POST':
        title = request.form.get('title', '')
        get_circulation().add_book(g.user, title, request.form.get('author', ''))
        flash(f'"{title.strip()}" added to the catalog', 'success')
        return redirect(url_for('admin.dashboard'))

    return render_template('pages/admin/add_book.html', user=g.user)


@admin_bp.route('/edit/<int:book_id>', methods=['GET', 'POST'])
@login_required
@role_required('admin')
def edit_book(book_id: int):
    """Show or submit the edit form for a book's title and author."""
    circulation = get_circulation()
    if request.method == 'POST':
        book = circulation.edit_book(
            g.user,
            book_id,
            request.form.get('title', ''),
            request.form.get('author', '')
        )
        flash(f'"{book.title}" updated', 'success')
        return redirect(url_for('main.index'))

    return render_template(
        'pages/admin/edit_book.html',
        book=circulation.get_book(book_id),
        user=g.user
    )


@admin_bp.route('/delete/<int:book_id>', methods=['POST'])
@login_required
@role_required('admin')
def delete_book(book_id: int):
    get_circulation().delete_book(g.user, book_id)
    flash('Book deleted', 'success')
    return redirect(url_for('main.index'))
