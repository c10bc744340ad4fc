"""
Tests for MetadataService against an in-memory repository.

Run:
    pytest tests/test_service.py -v
"""
import pytest

from projmeta.core.errors import AuthorizationError, NotFoundError, PersistenceError
from projmeta.db.repository import ProjectRecord, ProjectRepository
from projmeta.metadata.permissions import Membership, Principal
from projmeta.metadata.service import MetadataService
from projmeta.schemas.project import ProjectCreate


class InMemoryRepository:
    def __init__(self):
        self.records = {}
        self.saves = 0

    def add(self, record):
        self.records[record.id] = record

    def get(self, project_id):
        return self.records.get(project_id)

    def save_metadata(self, project_id, metadata):
        record = self.records[project_id]
        self.records[project_id] = ProjectRecord(
            id=record.id, name=record.name, owner_id=record.owner_id,
            members=record.members, metadata=metadata,
        )
        self.saves += 1
        return self.records[project_id]

    def create(self, name, owner_id, metadata, description=None):
        record = ProjectRecord(
            id=len(self.records) + 1, name=name, owner_id=owner_id,
            members=(Membership(owner_id, "owner"),), metadata=metadata,
        )
        self.add(record)
        return record


@pytest.fixture
def repository():
    repo = InMemoryRepository()
    repo.add(ProjectRecord(
        id=1,
        name="Spring Gala",
        owner_id="owner",
        members=(Membership("helper", "member"), Membership("guest", "viewer")),
        metadata={
            "tags": ["gala"],
            "customFields": [
                {"id": "venue", "name": "Venue", "type": "text", "order": 1},
                {"id": "kind", "name": "Kind", "type": "select", "options": ["Party", "Dinner"], "order": 0},
            ],
        },
    ))
    return repo


@pytest.fixture
def service(repository):
    return MetadataService(repository)


def test_custom_fields_are_sorted_by_order(service):
    result = service.get_custom_fields(Principal("guest"), 1)
    assert [f["id"] for f in result["customFields"]] == ["kind", "venue"]


def test_authorization_precedes_validation(service, repository):
    with pytest.raises(AuthorizationError):
        service.patch_metadata(Principal("guest"), 1, {"budget": "not an object"})
    assert repository.saves == 0


def test_unknown_project(service):
    with pytest.raises(NotFoundError):
        service.get_metadata(Principal("owner"), 42)


def test_field_values_keep_definitions(service, repository):
    service.patch_field_values(Principal("helper"), 1, {"fieldValues": {"venue": "Boathouse"}})
    stored = repository.get(1).metadata
    assert stored["customFields"][0] == {
        "id": "venue", "name": "Venue", "type": "text", "order": 1, "value": "Boathouse",
    }
    assert stored["lastModifiedBy"] == "helper"
    assert stored["tags"] == ["gala"]


def test_create_from_template_stamps_creator(service):
    result = service.create_project(Principal("planner"), ProjectCreate(name="Summit", template="event"))
    metadata = result["metadata"]
    assert metadata["template"] == "event"
    assert metadata["lastModifiedBy"] == "planner"
    assert {f["id"] for f in metadata["customFields"]} == {"venue", "expected_attendees", "event_type"}


def test_persistence_failure_surfaces_as_server_error(client, project, users, auth, monkeypatch):
    def fail(self, project_id, metadata):
        raise PersistenceError("Failed to update project metadata")

    monkeypatch.setattr(ProjectRepository, "save_metadata", fail)
    response = client.patch(
        f"/api/v1/projects/{project.id}/metadata", json={"tags": []}, headers=auth(users["owner"])
    )
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to update project metadata"}
