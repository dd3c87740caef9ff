import pytest
from fastapi.testclient import TestClient

from app.core.constants import RoleEnum
from tests.helpers.smoke_utils import create_lesson, create_module, create_program, create_resource, enroll

# Only admins and the owning instructor may change a program's content.
CALLERS = {"admin": True, "owner": True, "other_instructor": False, "enrolled_learner": False}


@pytest.fixture
def tree(client: TestClient, headers_for):
    _, owner = headers_for(RoleEnum.INSTRUCTOR)
    program = create_program(client, owner)
    module = create_module(client, owner, program["id"])
    lesson = create_lesson(client, owner, module["id"])
    resource = create_resource(client, owner, lesson["id"])
    _, learner = headers_for(RoleEnum.USER)
    enroll(client, learner, program["id"])
    headers = {
        "admin": headers_for(RoleEnum.ADMIN)[1],
        "owner": owner,
        "other_instructor": headers_for(RoleEnum.INSTRUCTOR)[1],
        "enrolled_learner": learner,
    }
    return {"program": program, "module": module, "lesson": lesson, "resource": resource, "headers": headers}


def mutations(t):
    p, m, l, r = t["program"]["id"], t["module"]["id"], t["lesson"]["id"], t["resource"]["id"]
    return [
        ("PUT", f"/api/programs/{p}", {"json": {"description": "changed"}}),
        ("PUT", f"/api/programs/{p}/modules/reorder", {"json": {"ordered_ids": [m]}}),
        ("PUT", f"/api/programs/modules/{m}/lessons/reorder", {"json": {"ordered_ids": [l]}}),
        ("PUT", f"/api/programs/lessons/{l}/resources/reorder", {"json": {"ordered_ids": [r]}}),
        ("PUT", f"/api/programs/modules/{m}", {"json": {"title": "Renamed"}}),
        ("PUT", f"/api/programs/lessons/{l}", {"json": {"title": "Renamed lesson"}}),
        ("PUT", f"/api/programs/resources/{r}", {"data": {"title": "Renamed resource"}}),
        ("POST", f"/api/programs/{p}/modules", {"json": {"title": "New"}}),
        ("POST", f"/api/programs/modules/{m}/lessons", {"json": {"title": "New lesson"}}),
        ("POST", f"/api/programs/lessons/{l}/resources", {"data": {"title": "Extra", "file_url": "https://x.test/a", "file_type": "PDF"}}),
    ]


@pytest.mark.parametrize("caller", list(CALLERS))
def test_content_mutation_matrix(client: TestClient, tree, caller):
    for method, path, kwargs in mutations(tree):
        response = client.request(method, path, headers=tree["headers"][caller], **kwargs)
        if CALLERS[caller]:
            assert 200 <= response.status_code < 300, f"{caller} {method} {path} => {response.status_code}, body={response.text}"
        else:
            assert response.status_code == 403, f"{caller} {method} {path} => {response.status_code}, body={response.text}"


@pytest.mark.parametrize("caller", ["other_instructor", "enrolled_learner"])
def test_deletes_denied_for_non_managers(client: TestClient, tree, caller):
    headers = tree["headers"][caller]
    for path in (
        f"/api/programs/resources/{tree['resource']['id']}",
        f"/api/programs/lessons/{tree['lesson']['id']}",
        f"/api/programs/modules/{tree['module']['id']}",
        f"/api/programs/{tree['program']['id']}",
    ):
        response = client.delete(path, headers=headers)
        assert response.status_code == 403, f"{caller} DELETE {path} => {response.status_code}"
