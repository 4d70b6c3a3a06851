"""Flask CLI commands for database management.

Usage:
    flask --app library_app.app init-db            # create missing tables
    flask --app library_app.app init-db --reset    # drop and recreate (data lost)
    flask --app library_app.app seed
    flask --app library_app.app create-user alice s3cret --role member
"""
import click
from flask import current_app
from flask.cli import with_appcontext

from library_app.errors import DuplicateUsername, LibraryError
from library_app.models.database import create_schema, drop_schema, get_db
from library_app.models.user import ROLES, User
from library_app.seed import seed_admin, seed_books


@click.command('init-db')
@click.option('--reset', is_flag=True, help='Drop all tables first (all data is lost).')
@with_appcontext
def init_db_command(reset):
    """Create the database tables."""
    db = get_db()
    if reset:
        click.confirm('This deletes every user, book and session. Continue?', abort=True)
        drop_schema(db)
        click.echo('Dropped existing tables')
    create_schema(db)
    click.echo('Database ready')


@click.command('seed')
@with_appcontext
def seed_command():
    """Create the admin account and sample books if missing."""
    db = get_db()
    create_schema(db)
    try:
        admin_id = seed_admin(
            db,
            current_app.config['ADMIN_USERNAME'],
            current_app.config['ADMIN_PASSWORD']
        )
    except LibraryError as e:
        raise click.ClickException(e.message)
    if admin_id:
        click.echo(f'Admin user created with ID: {admin_id}')
    click.echo(f'{seed_books(db)} book(s) added')


@click.command('create-user')
@click.argument('username')
@click.argument('password')
@click.option('--role', type=click.Choice(ROLES), default='member', show_default=True)
@with_appcontext
def create_user_command(username, password, role):
    """Create a user account."""
    try:
        user_id = User.register(get_db(), username, password, role=role)
    except DuplicateUsername:
        raise click.ClickException(f"User '{username}' already exists")
    except LibraryError as e:
        raise click.ClickException(e.message)
    click.echo(f'Created user: {username} (role: {role}, id: {user_id})')


def register_commands(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_command)
    app.cli.add_command(create_user_command)
