from fastapi.testclient import TestClient

from app.core.constants import EnrollmentStatusEnum
from app.models.enrollment import Enrollment
from app.utils import permission as permission_module
from tests.helpers.asserts import assert_error
from tests.helpers.smoke_utils import build_program, enroll


def test_unenrolled_learner_denied_learning_content(client: TestClient, instructor_headers, learner_headers):
    program, _ = build_program(client, instructor_headers, [1])
    response = client.get(f"/api/programs/{program['id']}/learning-content", headers=learner_headers)
    assert_error(response, 403, "FORBIDDEN")


def test_enrollment_check_failure_fails_closed(client: TestClient, instructor_headers, learner_headers, monkeypatch):
    program, lesson_ids = build_program(client, instructor_headers, [1])
    enroll(client, learner_headers, program["id"])

    def _broken_exists(db, *, user_id, program_id):
        raise RuntimeError("enrollment lookup exploded")

    monkeypatch.setattr(permission_module.crud_enrollment, "exists", _broken_exists)

    response = client.get(f"/api/programs/{program['id']}/learning-content", headers=learner_headers)
    assert_error(response, 403, "FORBIDDEN")

    response = client.post("/api/progress/lessons/complete", headers=learner_headers, json={"lesson_id": lesson_ids[0]})
    assert_error(response, 403, "FORBIDDEN")


def test_unenrolling_revokes_access(client: TestClient, instructor_headers, learner_headers):
    program, _ = build_program(client, instructor_headers, [1])
    enroll(client, learner_headers, program["id"])
    assert client.get(f"/api/programs/{program['id']}/learning-content", headers=learner_headers).status_code == 200

    client.delete(f"/api/programs/{program['id']}/enroll", headers=learner_headers)
    response = client.get(f"/api/programs/{program['id']}/learning-content", headers=learner_headers)
    assert_error(response, 403, "FORBIDDEN")


def test_inactive_enrollment_denies_access_and_rollups(client: TestClient, db_session, instructor_headers, learner_headers):
    program, lesson_ids = build_program(client, instructor_headers, [1])
    enrollment = enroll(client, learner_headers, program["id"])

    record = db_session.get(Enrollment, enrollment["id"])
    record.status = EnrollmentStatusEnum.INACTIVE
    db_session.commit()

    response = client.get(f"/api/programs/{program['id']}/learning-content", headers=learner_headers)
    assert_error(response, 403, "FORBIDDEN")
    response = client.post("/api/progress/lessons/complete", headers=learner_headers, json={"lesson_id": lesson_ids[0]})
    assert_error(response, 403, "FORBIDDEN")
    assert client.get("/api/progress/programs", headers=learner_headers).json()["data"] == []
