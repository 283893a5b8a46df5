"""Tests for client portal endpoints."""

from fastapi.testclient import TestClient

from client_portal.api.app import create_app
from tests.conftest import PROJECT_ID, FakeClock, issue_link


def _client(container) -> TestClient:
    return TestClient(create_app(container))


def test_health(container) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_open_portal_endpoint(container) -> None:
    link = issue_link(container, ["locations", "timeline"])

    response = _client(container).post(
        "/portal/open",
        json={"projectId": PROJECT_ID, "accessToken": link.access_token},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    project = data["project"]
    assert project["projectName"] == "Smith Wedding"
    assert project["currentStepID"] == "welcome"
    assert [step["stepId"] for step in project["portalSteps"]] == [
        "welcome",
        "locations",
        "timeline",
        "thankYou",
    ]
    assert project["metadata"]["clientAccessCount"] == 1
    assert link.access_token not in response.text


def test_validate_endpoint_reports_disabled_link(container) -> None:
    link = issue_link(container, ["locations"])
    container.link_service.disable_portal_link(PROJECT_ID, "photographer-1")

    response = _client(container).post(
        "/portal/validate",
        json={"projectId": PROJECT_ID, "accessToken": link.access_token},
    )

    assert response.status_code == 403
    assert response.json() == {
        "success": False,
        "error": {
            "kind": "permission-denied",
            "message": "This portal link is invalid or has been disabled.",
        },
    }


def test_expired_link_is_forbidden(container, clock: FakeClock) -> None:
    link = issue_link(container, ["locations"])
    clock.advance(days=31)

    response = _client(container).post(
        "/portal/validate",
        json={"projectId": PROJECT_ID, "accessToken": link.access_token},
    )

    assert response.status_code == 403
    assert response.json()["error"]["kind"] == "deadline-exceeded"


def test_unknown_project_is_not_found(container) -> None:
    response = _client(container).post(
        "/portal/validate", json={"projectId": "P404", "accessToken": "abc"}
    )

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "This portal link is invalid."


def test_missing_fields_are_invalid_argument(container) -> None:
    response = _client(container).post("/portal/validate", json={})

    assert response.status_code == 400
    assert response.json()["error"]["kind"] == "invalid-argument"


def test_malformed_body_is_invalid_argument(container) -> None:
    response = _client(container).post(
        "/portal/steps/skip", json={"projectId": ["P1"]}
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_save_and_read_section(container) -> None:
    link = issue_link(container, ["groupShots"])
    client = _client(container)

    saved = client.post(
        "/portal/sections/save",
        json={
            "projectId": PROJECT_ID,
            "accessToken": link.access_token,
            "sectionId": "groupShots",
            "items": [
                {"id": "g1", "name": "Couple", "categoryId": "c", "checked": True},
                {"id": "g2", "name": "Family", "categoryId": "c", "checked": False},
            ],
        },
    )
    read = client.post(
        "/portal/sections/get",
        json={
            "projectId": PROJECT_ID,
            "accessToken": link.access_token,
            "sectionId": "groupShots",
        },
    )

    assert saved.status_code == 200
    assert saved.json()["itemCount"] == 1
    assert saved.json()["config"]["totalTimeEstimated"] == 3
    assert read.status_code == 200
    assert [item["id"] for item in read.json()["items"]] == ["g1"]


def test_too_many_items_endpoint(container) -> None:
    link = issue_link(container, ["photoRequests"])

    response = _client(container).post(
        "/portal/sections/save",
        json={
            "projectId": PROJECT_ID,
            "accessToken": link.access_token,
            "sectionId": "photoRequests",
            "items": [{"id": str(i), "title": "Shot"} for i in range(6)],
        },
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Too many requests provided."


def test_submit_then_save_is_locked(container) -> None:
    link = issue_link(container, ["locations"])
    client = _client(container)
    body = {
        "projectId": PROJECT_ID,
        "accessToken": link.access_token,
        "sectionId": "locations",
    }

    submitted = client.post("/portal/sections/submit", json=body)
    saved = client.post("/portal/sections/save", json={**body, "items": []})

    assert submitted.status_code == 200
    assert submitted.json()["config"]["status"] == "locked"
    assert submitted.json()["config"]["actionOn"] == "photographer"
    assert saved.status_code == 403
    assert saved.json()["error"]["message"] == (
        "This section is locked and can no longer be edited."
    )


def test_step_endpoints(container) -> None:
    link = issue_link(container, ["keyPeople", "locations"])
    client = _client(container)
    base = {"projectId": PROJECT_ID, "accessToken": link.access_token}

    current = client.post("/portal/steps/current", json={**base, "stepId": "locations"})
    status = client.post(
        "/portal/steps/status",
        json={**base, "stepId": "locations", "status": "inProgress"},
    )
    skipped = client.post("/portal/steps/skip", json={**base, "stepId": "keyPeople"})
    required = client.post("/portal/steps/skip", json={**base, "stepId": "locations"})

    assert current.json()["currentStepID"] == "locations"
    steps = {step["stepId"]: step for step in status.json()["steps"]}
    assert steps["locations"]["stepStatus"] == "inProgress"
    assert skipped.status_code == 200
    assert skipped.json()["currentStepID"] == "welcome"
    assert skipped.json()["metadata"]["completedSteps"] == 1
    assert skipped.json()["metadata"]["completionPercentage"] == 50
    assert required.status_code == 409
    assert required.json()["error"]["kind"] == "failed-precondition"


def test_activity_endpoint(container) -> None:
    link = issue_link(container, ["locations"])

    response = _client(container).post(
        "/portal/activity",
        json={
            "projectId": PROJECT_ID,
            "accessToken": link.access_token,
            "activityType": "portal_opened",
            "metadata": {"userAgent": "test"},
        },
    )

    assert response.status_code == 200
    assert response.json()["activityId"]
