"""
Persistence layer: SQLAlchemy models, the user store and refresh registries.

The app factory owns one DBStorage and one refresh registry per application
and keeps them in app.extensions; handlers reach them through the accessors
below instead of module-level singletons.
"""
from flask import current_app


def get_storage():
    """DBStorage bound to the current application."""
    return current_app.extensions["storage"]


def get_registry():
    """Refresh token registry bound to the current application."""
    return current_app.extensions["refresh_registry"]
