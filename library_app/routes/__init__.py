"""Routes package initialization.

This module exports all blueprints for registration in the main app.

Blueprint organization:
    - auth_bp: Authentication (login, register, logout)
    - main_bp: Catalog, borrow and return
    - admin_bp: Admin dashboard and catalog management
"""
from library_app.routes.admin_routes import admin_bp
from library_app.routes.auth_routes import auth_bp
from library_app.routes.main_routes import main_bp

__all__ = [
    'auth_bp',
    'main_bp',
    'admin_bp',
]
