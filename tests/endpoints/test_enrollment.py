from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.program_progress import ProgramProgress
from tests.helpers.asserts import api_call, assert_error, data_of
from tests.helpers.smoke_utils import build_program, create_program, enroll


def test_enroll_initializes_progress(client: TestClient, instructor_headers, learner_headers, db_session: Session):
    program, lesson_ids = build_program(client, instructor_headers, [2, 1])
    enrollment = enroll(client, learner_headers, program["id"])
    assert enrollment["program_id"] == program["id"]
    assert enrollment["program_name"] == program["name"]
    assert enrollment["status"] == "active"

    rollup = db_session.query(ProgramProgress).filter(ProgramProgress.program_id == program["id"]).one()
    assert rollup.total_lessons == len(lesson_ids)
    assert rollup.completed_lessons == 0

    mine = data_of(api_call(client, "GET", "/api/enrollments", headers=learner_headers))
    assert [e["program_id"] for e in mine] == [program["id"]]


def test_duplicate_enrollment_conflicts(client: TestClient, instructor_headers, learner_headers):
    program = create_program(client, instructor_headers)
    enroll(client, learner_headers, program["id"])
    response = client.post(f"/api/programs/{program['id']}/enroll", headers=learner_headers)
    assert_error(response, 409, "CONFLICT")


def test_only_learners_enroll(client: TestClient, instructor_headers):
    program = create_program(client, instructor_headers)
    response = client.post(f"/api/programs/{program['id']}/enroll", headers=instructor_headers)
    assert_error(response, 403, "FORBIDDEN")


def test_enroll_missing_or_inactive_program(client: TestClient, instructor_headers, learner_headers):
    assert_error(client.post("/api/programs/9999/enroll", headers=learner_headers), 404, "NOT_FOUND")

    program = create_program(client, instructor_headers)
    api_call(client, "PUT", f"/api/programs/{program['id']}", headers=instructor_headers, json={"is_active": False})
    assert_error(client.post(f"/api/programs/{program['id']}/enroll", headers=learner_headers), 404, "NOT_FOUND")


def test_unenroll(client: TestClient, instructor_headers, learner_headers):
    program = create_program(client, instructor_headers)
    enroll(client, learner_headers, program["id"])

    api_call(client, "DELETE", f"/api/programs/{program['id']}/enroll", headers=learner_headers)
    assert data_of(api_call(client, "GET", "/api/enrollments", headers=learner_headers)) == []
    assert_error(client.delete(f"/api/programs/{program['id']}/enroll", headers=learner_headers), 404, "NOT_FOUND")
