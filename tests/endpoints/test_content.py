from fastapi.testclient import TestClient

from app.core.constants import RoleEnum
from tests.helpers.asserts import api_call, assert_error, data_of
from tests.helpers.smoke_utils import create_lesson, create_module, create_program, create_resource


def test_module_crud(client: TestClient, instructor_headers):
    program = create_program(client, instructor_headers)
    module = create_module(client, instructor_headers, program["id"], title="Week 1", is_published=False)
    assert module["order_index"] == 0
    assert module["is_published"] is False

    updated = data_of(api_call(
        client, "PUT", f"/api/programs/modules/{module['id']}",
        headers=instructor_headers, json={"title": "Week One", "is_published": True},
    ))
    assert updated["title"] == "Week One"
    assert updated["is_published"] is True

    modules = data_of(api_call(client, "GET", f"/api/programs/{program['id']}/modules", headers=instructor_headers))
    assert [m["id"] for m in modules] == [module["id"]]

    api_call(client, "DELETE", f"/api/programs/modules/{module['id']}", headers=instructor_headers)
    modules = data_of(api_call(client, "GET", f"/api/programs/{program['id']}/modules", headers=instructor_headers))
    assert modules == []


def test_explicit_order_index_inserts_and_shifts(client: TestClient, instructor_headers):
    program = create_program(client, instructor_headers)
    week_a = create_module(client, instructor_headers, program["id"], title="A")
    week_b = create_module(client, instructor_headers, program["id"], title="B", order_index=0)
    assert week_b["order_index"] == 0

    far = create_module(client, instructor_headers, program["id"], title="Far", order_index=5)
    assert far["order_index"] == 2

    modules = data_of(api_call(client, "GET", f"/api/programs/{program['id']}/modules", headers=instructor_headers))
    assert [(m["title"], m["order_index"]) for m in modules] == [("B", 0), ("A", 1), ("Far", 2)]
    assert week_a["id"] == modules[1]["id"]


def test_lesson_crud_and_ordering(client: TestClient, instructor_headers):
    program = create_program(client, instructor_headers)
    module = create_module(client, instructor_headers, program["id"])
    first = create_lesson(client, instructor_headers, module["id"], title="Warm up")
    second = create_lesson(client, instructor_headers, module["id"], title="Squats")
    assert (first["order_index"], second["order_index"]) == (0, 1)

    updated = data_of(api_call(
        client, "PUT", f"/api/programs/lessons/{second['id']}",
        headers=instructor_headers, json={"video_url": "https://videos.test/squats.mp4", "is_preview": True},
    ))
    assert updated["video_url"] == "https://videos.test/squats.mp4"
    assert updated["is_preview"] is True

    api_call(client, "DELETE", f"/api/programs/lessons/{first['id']}", headers=instructor_headers)
    lessons = data_of(api_call(client, "GET", f"/api/programs/modules/{module['id']}/lessons", headers=instructor_headers))
    assert [(l["id"], l["order_index"]) for l in lessons] == [(second["id"], 0)]


def test_resource_with_url(client: TestClient, instructor_headers):
    program = create_program(client, instructor_headers)
    module = create_module(client, instructor_headers, program["id"])
    lesson = create_lesson(client, instructor_headers, module["id"])

    resource = create_resource(client, instructor_headers, lesson["id"])
    assert resource["file_url"] == "https://cdn.test/handout.pdf"
    assert resource["file_type"] == "PDF"
    assert resource["order_index"] == 0

    updated = data_of(api_call(
        client, "PUT", f"/api/programs/resources/{resource['id']}",
        headers=instructor_headers, data={"title": "Updated handout"},
    ))
    assert updated["title"] == "Updated handout"
    assert updated["file_url"] == "https://cdn.test/handout.pdf"

    api_call(client, "DELETE", f"/api/programs/resources/{resource['id']}", headers=instructor_headers)
    resources = data_of(api_call(client, "GET", f"/api/programs/lessons/{lesson['id']}/resources", headers=instructor_headers))
    assert resources == []


def test_resource_file_upload_overrides_fields(client: TestClient, instructor_headers, file_storage):
    program = create_program(client, instructor_headers)
    module = create_module(client, instructor_headers, program["id"])
    lesson = create_lesson(client, instructor_headers, module["id"])

    response = api_call(
        client, "POST", f"/api/programs/lessons/{lesson['id']}/resources",
        headers=instructor_headers,
        data={"title": "Meal plan", "file_url": "https://ignored.test/x", "file_type": "DOC"},
        files={"file": ("meal-plan.pdf", b"%PDF-1.4 fake", "application/pdf")},
    )
    resource = data_of(response)
    assert resource["file_type"] == "application/pdf"
    assert resource["file_size_bytes"] == len(b"%PDF-1.4 fake")
    assert resource["file_url"].startswith("http://files.test/resources/")
    assert resource["file_url"].endswith(".pdf")
    assert len(file_storage.stored) == 1
    assert file_storage.stored[0][0] == "resources"


def test_resource_requires_url_or_file(client: TestClient, instructor_headers):
    program = create_program(client, instructor_headers)
    module = create_module(client, instructor_headers, program["id"])
    lesson = create_lesson(client, instructor_headers, module["id"])

    response = client.post(
        f"/api/programs/lessons/{lesson['id']}/resources",
        headers=instructor_headers,
        data={"title": "Nothing attached"},
    )
    assert_error(response, 400, "BAD_REQUEST")


def test_content_for_missing_parents(client: TestClient, instructor_headers):
    assert_error(client.post("/api/programs/9999/modules", headers=instructor_headers, json={"title": "x"}), 404, "NOT_FOUND")
    assert_error(client.post("/api/programs/modules/9999/lessons", headers=instructor_headers, json={"title": "x"}), 404, "NOT_FOUND")
    assert_error(client.put("/api/programs/lessons/9999", headers=instructor_headers, json={"title": "x"}), 404, "NOT_FOUND")
    assert_error(client.delete("/api/programs/resources/9999", headers=instructor_headers), 404, "NOT_FOUND")


def test_non_owner_cannot_author_content(client: TestClient, headers_for):
    _, owner_headers = headers_for(RoleEnum.INSTRUCTOR)
    _, other_headers = headers_for(RoleEnum.INSTRUCTOR)
    program = create_program(client, owner_headers)
    module = create_module(client, owner_headers, program["id"])

    assert_error(client.post(f"/api/programs/{program['id']}/modules", headers=other_headers, json={"title": "x"}), 403, "FORBIDDEN")
    assert_error(client.put(f"/api/programs/modules/{module['id']}", headers=other_headers, json={"title": "x"}), 403, "FORBIDDEN")
    assert_error(client.delete(f"/api/programs/modules/{module['id']}", headers=other_headers), 403, "FORBIDDEN")


def test_admin_can_author_any_program(client: TestClient, instructor_headers, admin_headers):
    program = create_program(client, instructor_headers)
    module = create_module(client, admin_headers, program["id"], title="Admin module")
    assert module["program_id"] == program["id"]
