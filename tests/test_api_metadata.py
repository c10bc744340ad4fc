"""
HTTP tests for the whole-document metadata routes.

Run:
    pytest tests/test_api_metadata.py -v
"""


def url(project, suffix=""):
    return f"/api/v1/projects/{project.id}/metadata{suffix}"


class TestReadMetadata:
    def test_owner_sees_metadata_and_permissions(self, client, project, users, auth):
        response = client.get(url(project), headers=auth(users["owner"]))
        assert response.status_code == 200
        body = response.json()
        assert body["projectId"] == project.id
        assert body["projectName"] == "Harbour Bridge Retrofit"
        assert body["metadata"]["budget"]["allocated"] == 250000
        assert body["permissions"] == {"canEdit": True, "canEditFieldValues": True}
        assert "construction" in body["schema"]["templates"]
        assert body["schema"]["currencies"][0] == "USD"

    def test_member_can_only_edit_values(self, client, project, users, auth):
        response = client.get(url(project), headers=auth(users["member"]))
        assert response.status_code == 200
        assert response.json()["permissions"] == {"canEdit": False, "canEditFieldValues": True}

    def test_viewer_can_read(self, client, project, users, auth):
        response = client.get(url(project), headers=auth(users["viewer"]))
        assert response.status_code == 200
        assert response.json()["permissions"] == {"canEdit": False, "canEditFieldValues": False}

    def test_outsider_gets_not_found(self, client, project, users, auth):
        response = client.get(url(project), headers=auth(users["outsider"]))
        assert response.status_code == 404
        assert response.json() == {"error": "Project not found or access denied"}

    def test_missing_project_looks_the_same(self, client, project, users, auth):
        response = client.get(f"/api/v1/projects/{project.id + 999}/metadata", headers=auth(users["owner"]))
        assert response.status_code == 404
        assert response.json() == {"error": "Project not found or access denied"}

    def test_anonymous_is_unauthorized(self, client, project):
        response = client.get(url(project))
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_garbage_token_is_unauthorized(self, client, project):
        response = client.get(url(project), headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_cookie_token_is_accepted(self, client, project, users, auth):
        token = auth(users["viewer"])["Authorization"]
        client.cookies.set("access_token", token)
        response = client.get(url(project))
        assert response.status_code == 200


class TestPatchMetadata:
    def test_patch_keeps_untouched_keys(self, client, project, users, auth):
        response = client.patch(url(project), json={"tags": ["steel", "urgent"]}, headers=auth(users["owner"]))
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Project metadata updated successfully"
        metadata = body["metadata"]
        assert metadata["tags"] == ["steel", "urgent"]
        assert metadata["budget"]["allocated"] == 250000
        assert len(metadata["customFields"]) == 3
        assert metadata["lastModifiedBy"] == users["owner"].id
        assert metadata["lastModified"]

    def test_patch_is_persisted(self, client, project, users, auth):
        client.patch(url(project), json={"tags": ["persisted"]}, headers=auth(users["admin"]))
        response = client.get(url(project), headers=auth(users["viewer"]))
        assert response.json()["metadata"]["tags"] == ["persisted"]

    def test_client_supplied_stamps_are_ignored(self, client, project, users, auth):
        response = client.patch(
            url(project),
            json={"tags": [], "lastModifiedBy": "mallory"},
            headers=auth(users["admin"]),
        )
        assert response.json()["metadata"]["lastModifiedBy"] == users["admin"].id

    def test_invalid_payload_is_rejected_with_details(self, client, project, users, auth):
        response = client.patch(
            url(project),
            json={"budget": {"allocated": -1}, "template": "spaceship"},
            headers=auth(users["owner"]),
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed"
        fields = {detail["field"] for detail in body["details"]}
        assert fields == {"budget.allocated", "template"}

    def test_invalid_payload_changes_nothing(self, client, project, users, auth):
        client.patch(
            url(project),
            json={"tags": ["never"], "milestones": [{"name": "x", "date": "bad"}]},
            headers=auth(users["owner"]),
        )
        response = client.get(url(project), headers=auth(users["owner"]))
        assert response.json()["metadata"]["tags"] == ["bridge"]

    def test_member_is_forbidden(self, client, project, users, auth):
        response = client.patch(url(project), json={"tags": []}, headers=auth(users["member"]))
        assert response.status_code == 403
        assert response.json() == {"error": "Insufficient permissions to edit project metadata"}

    def test_outsider_is_not_found(self, client, project, users, auth):
        response = client.patch(url(project), json={"tags": []}, headers=auth(users["outsider"]))
        assert response.status_code == 404


class TestReplaceMetadata:
    def test_replace_drops_known_keys_not_supplied(self, client, project, users, auth):
        response = client.put(
            url(project),
            json={"template": "event", "tags": ["gala"]},
            headers=auth(users["admin"]),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Project metadata replaced successfully"
        metadata = body["metadata"]
        assert metadata["template"] == "event"
        assert metadata["tags"] == ["gala"]
        assert metadata["customFields"] == []
        assert "budget" not in metadata
        assert metadata["legacyNotes"] == "written by an older client"

    def test_viewer_is_forbidden(self, client, project, users, auth):
        response = client.put(url(project), json={}, headers=auth(users["viewer"]))
        assert response.status_code == 403


class TestValidateMetadata:
    def test_reports_problems_without_saving(self, client, project, users, auth):
        response = client.post(
            url(project, "/validate"),
            json={
                "milestones": [
                    {"name": "Kickoff", "date": "2025-01-01"},
                    {"name": "Launch", "date": "next week"},
                ],
                "customFields": [{"name": "Phase", "type": "select"}],
                "budget": {"allocated": 100, "currency": "XYZ"},
            },
            headers=auth(users["viewer"]),
        )
        assert response.status_code == 200
        body = response.json()
        validation = body["validation"]
        assert validation["isValid"] is False
        assert validation["fieldValidation"]["milestone_0"] == {"isValid": True, "errors": []}
        assert validation["fieldValidation"]["milestone_1"]["isValid"] is False
        assert validation["fieldValidation"]["customField_0"]["isValid"] is False
        assert validation["fieldValidation"]["budget"]["isValid"] is False
        assert any(error.startswith("Milestone 2: ") for error in validation["errors"])
        assert any(error.startswith("Custom field 1: ") for error in validation["errors"])
        assert any(error.startswith("Budget: ") for error in validation["errors"])
        assert body["timestamp"]

        stored = client.get(url(project), headers=auth(users["owner"])).json()["metadata"]
        assert len(stored["milestones"]) == 1

    def test_valid_request(self, client, project, users, auth):
        response = client.post(
            url(project, "/validate"),
            json={"metadata": {"tags": ["ok"]}},
            headers=auth(users["member"]),
        )
        validation = response.json()["validation"]
        assert validation == {"isValid": True, "errors": [], "warnings": [], "fieldValidation": {}}

    def test_many_milestones_warn(self, client, project, users, auth):
        milestones = [{"name": f"M{i}", "date": "2025-01-01"} for i in range(21)]
        response = client.post(
            url(project, "/validate"), json={"milestones": milestones}, headers=auth(users["owner"])
        )
        validation = response.json()["validation"]
        assert validation["isValid"] is True
        assert validation["warnings"] == ["Large number of milestones may impact performance"]

    def test_wrong_shape_is_a_validation_error(self, client, project, users, auth):
        response = client.post(
            url(project, "/validate"), json={"milestones": "none"}, headers=auth(users["owner"])
        )
        assert response.status_code == 400
        assert response.json()["details"] == [{"field": "milestones", "message": "'milestones' has the wrong type"}]

    def test_outsider_is_not_found(self, client, project, users, auth):
        response = client.post(url(project, "/validate"), json={}, headers=auth(users["outsider"]))
        assert response.status_code == 404
