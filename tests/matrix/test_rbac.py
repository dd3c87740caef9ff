import pytest
from fastapi.testclient import TestClient

from app.core.constants import RoleEnum
from tests.helpers.smoke_utils import build_program, enroll

# caller -> expected outcome for reading a program's content and progress
CALLERS = {
    "admin": "allow",
    "owner": "allow",
    "other_instructor": "deny",
    "enrolled_learner": "allow",
    "stranger_learner": "deny",
}
PATHS = [
    "/api/programs/{program_id}/learning-content",
    "/api/programs/{program_id}/modules",
    "/api/progress/programs/{program_id}",
    "/api/progress/lessons/{lesson_id}",
    "/api/progress/lessons/{lesson_id}/completed",
    "/api/programs/lessons/{lesson_id}/resources",
]


@pytest.fixture
def access_setup(client: TestClient, headers_for):
    _, owner = headers_for(RoleEnum.INSTRUCTOR)
    program, lesson_ids = build_program(client, owner, [1])
    _, enrolled = headers_for(RoleEnum.USER)
    enroll(client, enrolled, program["id"])
    headers = {
        "admin": headers_for(RoleEnum.ADMIN)[1],
        "owner": owner,
        "other_instructor": headers_for(RoleEnum.INSTRUCTOR)[1],
        "enrolled_learner": enrolled,
        "stranger_learner": headers_for(RoleEnum.USER)[1],
    }
    return program["id"], lesson_ids[0], headers


@pytest.mark.parametrize("path_tmpl", PATHS)
@pytest.mark.parametrize("caller", list(CALLERS))
def test_read_access_matrix(client: TestClient, access_setup, caller, path_tmpl):
    program_id, lesson_id, headers = access_setup
    path = path_tmpl.format(program_id=program_id, lesson_id=lesson_id)
    response = client.get(path, headers=headers[caller])
    if CALLERS[caller] == "allow":
        assert 200 <= response.status_code < 300, f"{caller} GET {path} => {response.status_code}, body={response.text}"
    else:
        assert response.status_code == 403, f"{caller} GET {path} => {response.status_code}, body={response.text}"


@pytest.mark.parametrize("caller", list(CALLERS))
def test_mark_complete_access_matrix(client: TestClient, access_setup, caller):
    _, lesson_id, headers = access_setup
    response = client.post("/api/progress/lessons/complete", headers=headers[caller], json={"lesson_id": lesson_id})
    if CALLERS[caller] == "allow":
        assert response.status_code == 200, response.text
    else:
        assert response.status_code == 403, response.text
