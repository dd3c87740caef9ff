import logging
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader, select_autoescape
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, To

from app.core.config import settings
from app.utils.events import event_bus, EMAIL_SEND_REQUESTED

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


@lru_cache(maxsize=1)
def get_template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
    )


class EmailService:
    @staticmethod
    def render_template(template_name: str, context: Dict[str, Any]) -> str:
        """
        Render an email template

        :param template_name: Name of the template file under app/templates
        :param context: Template variables, merged over the shared defaults
        :return: Rendered HTML
        """
        full_context = {
            "company_name": settings.PROJECT_NAME,
            "current_year": datetime.now().year,
            **context,
        }
        try:
            return get_template_env().get_template(template_name).render(**full_context)
        except Exception as e:
            logger.error(f"Error rendering email template {template_name}: {e}")
            raise

    @classmethod
    async def send_email(cls, to_email: str, subject: str, template_name: str, template_context: Dict[str, Any]):
        """Fire-and-forget: the request is handed to the event bus and delivered by the subscriber."""
        await event_bus.publish(EMAIL_SEND_REQUESTED, {
            "to_email": to_email,
            "subject": subject,
            "template_name": template_name,
            "template_context": template_context,
            "requested_at": datetime.utcnow().isoformat(),
        })

    @classmethod
    async def send_program_completed_email(cls, to_email: str, user_name: str, program_name: str):
        await cls.send_email(
            to_email=to_email,
            subject=f"Congratulations on completing {program_name}!",
            template_name="program_completed.html",
            template_context={"user_name": user_name, "program_name": program_name},
        )

    @classmethod
    async def _send_email_via_sendgrid(cls, to_email: str, subject: str, template_name: str, template_context: Dict[str, Any]):
        message = Mail(
            from_email=(settings.EMAILS_FROM_EMAIL, settings.EMAILS_FROM_NAME),
            to_emails=To(to_email),
            subject=subject,
            html_content=cls.render_template(template_name, template_context),
        )
        response = SendGridAPIClient(settings.SENDGRID_API_KEY).send(message)
        if response.status_code not in (200, 201, 202):
            raise Exception(f"SendGrid API error: {response.status_code} - {response.body}")
        logger.info(f"Email '{subject}' sent to {to_email} via SendGrid")


async def handle_email_send_requested(data: Dict[str, Any]):
    if not settings.EMAILS_ENABLED:
        logger.info(f"Emails disabled, dropping '{data['subject']}' for {data['to_email']}")
        return
    try:
        await EmailService._send_email_via_sendgrid(
            data["to_email"], data["subject"], data["template_name"], data["template_context"]
        )
    except Exception as e:
        logger.error(f"Failed to send email to {data['to_email']}: {e}")

event_bus.subscribe(EMAIL_SEND_REQUESTED, handle_email_send_requested)
