"""Configuration package."""
from library_app.config.config import Config

__all__ = ['Config']
