# backend/fieldops/api/dependencies/database.py
"""
Database-related dependencies.
"""

from fastapi import Request
from sqlalchemy.orm import Session, sessionmaker


def get_session_factory(request: Request) -> sessionmaker[Session]:
    """
    Get the session factory the application was built with.

    Services open one session per unit of work inside the worker thread
    doing it; no session is bound to the request itself.
    """
    return request.app.state.session_factory
