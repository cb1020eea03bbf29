"""Shared fixtures: in-memory sqlite database, API client and data builders."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_TO_FILE", "0")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from conference_api.database import Base, SessionLocal, engine
from conference_api.main import app
from conference_api.models.category import Category
from conference_api.models.conference import Conference
from conference_api.models.presentation import Presentation
from conference_api.models.presentation_author import PresentationAuthor
from conference_api.models.presenter import Presenter
from conference_api.models.presenter_conflict import PresenterConflict
from conference_api.models.section import Section
from conference_api.models.time_slot import TimeSlot
from conference_api.models.user import User
from conference_api.utils.auth import create_access_token

DAY = datetime(2026, 5, 14)


def at(hour: int, minute: int = 0, day: datetime = DAY) -> datetime:
    return day.replace(hour=hour, minute=minute)


@pytest.fixture(autouse=True)
def _reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client():
    return TestClient(app, raise_server_exceptions=False)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.username)}"}


class Builder:
    """Small helpers that add and commit rows, returning the ORM objects."""

    def __init__(self, db):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def user(self, username="organizer", role="organizer"):
        return self._save(User(username=username, role=role))

    def conference(self, owner: User, name="PyCon"):
        return self._save(Conference(name=name, created_by_id=owner.id))

    def category(self, conference, name="Main Track"):
        return self._save(Category(conference_id=conference.id, name=name))

    def section(self, conference, start=None, end=None, name="Session", category=None):
        return self._save(Section(
            conference_id=conference.id,
            category_id=category.id if category else None,
            name=name,
            start_time=start,
            end_time=end,
        ))

    def presenter(self, name="Ada Lovelace"):
        return self._save(Presenter(name=name, email=f"{name.split()[0].lower()}@example.com"))

    def presentation(self, title, presenters=(), section=None, review_status="APPROVED", co_authors=(), conference=None):
        talk = self._save(Presentation(
            title=title,
            conference_id=conference.id if conference else None,
            review_status=review_status,
            section_id=section.id if section else None,
        ))
        order = 0
        for p in presenters:
            self.db.add(PresentationAuthor(presentation_id=talk.id, presenter_id=p.id, is_presenter=True, order=order))
            order += 1
        for p in co_authors:
            self.db.add(PresentationAuthor(presentation_id=talk.id, presenter_id=p.id, is_presenter=False, order=order))
            order += 1
        self.db.commit()
        self.db.refresh(talk)
        return talk

    def time_slot_conflict(self, presenter, start, end, description=None):
        return self._save(PresenterConflict(
            presenter_id=presenter.id,
            conflict_type="TIME_SLOT",
            conflict_start_time=start,
            conflict_end_time=end,
            description=description,
        ))

    def full_day_conflict(self, presenter, day, description=None):
        return self._save(PresenterConflict(
            presenter_id=presenter.id,
            conflict_type="FULL_DAY",
            conflict_date=day,
            description=description,
        ))


@pytest.fixture()
def build(db):
    return Builder(db)


@pytest.fixture()
def organizer(build):
    return build.user("organizer", "organizer")


@pytest.fixture()
def conference(build, organizer):
    return build.conference(organizer)


def make_slot(db, section, start, end, order=1):
    slot = TimeSlot(section_id=section.id, start_time=start, end_time=end, order=order)
    db.add(slot)
    db.commit()
    db.refresh(slot)
    return slot
