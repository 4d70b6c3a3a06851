"""Catalog and circulation routes.

This module handles the member-facing pages: the catalog with the
"my books" section, and the borrow/return actions.
"""
from flask import Blueprint, flash, g, redirect, render_template, url_for

from library_app.utils.context import get_circulation
from library_app.utils.decorators import login_required

# Create main blueprint
main_bp = Blueprint('main', __name__)


@main_bp.route('/')
@login_required
def index():
    """Display the catalog with computed fines and the user's own loans."""
    catalog = get_circulation().list_catalog(g.user)
    return render_template(
        'pages/index.html',
        books=catalog.books,
        my_books=catalog.my_books,
        user=g.user
    )


@main_bp.route('/borrow/<int:book_id>', methods=['POST'])
@login_required
def borrow(book_id: int):
    book = get_circulation().borrow(book_id, g.user)
    flash(f'You borrowed "{book.title}". Please return it by {book.due_date}.', 'success')
    return redirect(url_for('main.index'))


@main_bp.route('/return/<int:book_id>', methods=['POST'])
@login_required
def return_book(book_id: int):
    book = get_circulation().return_book(book_id, g.user)
    flash(f'"{book.title}" has been returned.', 'success')
    return redirect(url_for('main.index'))
