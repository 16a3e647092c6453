from typing import Iterator

from fastapi import Request
from sqlalchemy.orm import Session

from .config import Settings
from .submission import SubmissionCoordinator


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_coordinator(request: Request) -> SubmissionCoordinator:
    return request.app.state.coordinator


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
