from fastapi.testclient import TestClient

from app.services.email import EmailService
from tests.helpers.asserts import api_call
from tests.helpers.smoke_utils import build_program, enroll


def test_program_completion_requests_one_email(client: TestClient, instructor_headers, learner_headers, monkeypatch):
    sent = []

    async def _capture(cls, to_email, user_name, program_name):
        sent.append((to_email, program_name))

    monkeypatch.setattr(EmailService, "send_program_completed_email", classmethod(_capture))

    program, lesson_ids = build_program(client, instructor_headers, [2])
    enroll(client, learner_headers, program["id"])

    api_call(client, "POST", "/api/progress/lessons/complete", headers=learner_headers, json={"lesson_id": lesson_ids[0]})
    assert sent == []

    api_call(client, "POST", "/api/progress/lessons/complete", headers=learner_headers, json={"lesson_id": lesson_ids[1]})
    assert len(sent) == 1
    assert sent[0][1] == program["name"]

    # Completing again is not a new transition.
    api_call(client, "POST", "/api/progress/lessons/complete", headers=learner_headers, json={"lesson_id": lesson_ids[1]})
    assert len(sent) == 1


def test_disabled_emails_are_dropped(monkeypatch):
    import asyncio
    from app.core.config import settings
    from app.services import email as email_module

    calls = []

    async def _fake_send(*args, **kwargs):
        calls.append(args)

    monkeypatch.setattr(settings, "EMAILS_ENABLED", False)
    monkeypatch.setattr(email_module.EmailService, "_send_email_via_sendgrid", _fake_send)

    asyncio.run(EmailService.send_program_completed_email("a@test.com", "Ada", "Yoga"))
    assert calls == []


def test_email_template_renders():
    html = EmailService.render_template("program_completed.html", {"user_name": "Ada", "program_name": "Yoga Flow"})
    assert "Ada" in html
    assert "Yoga Flow" in html
