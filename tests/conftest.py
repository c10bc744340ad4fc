"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database. The app's get_db
dependency is overridden to hand out sessions bound to it, so no file is
created on disk.
"""
import copy

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from projmeta.core.security import create_access_token
from projmeta.db.session import get_db
from projmeta.main import app
from projmeta.models import MemberRole, Project, ProjectMember, User


SEED_METADATA = {
    "template": "construction",
    "budget": {"allocated": 250000, "spent": 1200, "currency": "USD"},
    "tags": ["bridge"],
    "milestones": [
        {"name": "Survey", "date": "2025-01-10", "completed": True},
    ],
    "customFields": [
        {
            "id": "permit_status",
            "name": "Permit Status",
            "type": "select",
            "options": ["Pending", "Approved", "Denied", "Under Review"],
            "required": True,
            "order": 0,
            "value": "Pending",
        },
        {
            "id": "contractor",
            "name": "Primary Contractor",
            "type": "text",
            "required": False,
            "order": 1,
        },
        {
            "id": "crew_size",
            "name": "Crew Size",
            "type": "number",
            "required": False,
            "order": 2,
        },
    ],
    "legacyNotes": "written by an older client",
}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def users(db):
    """One user per project role plus an outsider with no relation to the project."""
    created = {}
    for key in ("owner", "admin", "member", "viewer", "outsider"):
        user = User(email=f"{key}@example.com", full_name=key.title())
        db.add(user)
        created[key] = user
    db.commit()
    for user in created.values():
        db.refresh(user)
    return created


@pytest.fixture
def project(db, users):
    project = Project(
        name="Harbour Bridge Retrofit",
        owner_id=users["owner"].id,
        project_metadata=copy.deepcopy(SEED_METADATA),
    )
    db.add(project)
    db.commit()
    db.refresh(project)

    db.add(ProjectMember(project_id=project.id, user_id=users["owner"].id, role=MemberRole.OWNER.value))
    for key in ("admin", "member", "viewer"):
        db.add(ProjectMember(project_id=project.id, user_id=users[key].id, role=key))
    db.commit()
    db.refresh(project)
    return project


@pytest.fixture
def auth():
    """Build Authorization headers for a user."""
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.email)}"}
    return _headers
