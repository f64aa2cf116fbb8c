"""
Outgoing e-mail.

Messages are rendered from the Jinja2 templates in ``templates/`` and sent
over SMTP in a worker thread. Delivery problems are logged and reported in
the returned ``EmailResult``; they never raise into the request that asked
for the mail.
"""

from __future__ import annotations

import smtplib
import ssl
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from functools import lru_cache
from typing import Any, Dict, Optional

from jinja2 import Environment, PackageLoader, select_autoescape
from starlette.concurrency import run_in_threadpool

from thinky.core.logging_config import get_logger
from thinky.server.core import constant
from thinky.server.core.config import SMTPConfig, settings

logger = get_logger(__name__)

TEMPLATES = (
    "verification",
    "password_reset",
    "moderation_decision_reported",
    "moderation_decision_reporter",
    "default",
)

_env = Environment(
    loader=PackageLoader("thinky.server.services", "templates"),
    autoescape=select_autoescape(["html"]),
)


def _base_context() -> Dict[str, Any]:
    return {
        "brand": constant.BRAND_NAME,
        "year": datetime.now().year,
        "support_email": settings.support_email,
    }


def render_template(name: str, variables: Optional[Dict[str, Any]] = None) -> str:
    """Render an e-mail body; unknown template names fall back to ``default``."""
    if name not in TEMPLATES:
        name = "default"
    context = _base_context()
    context.update(variables or {})
    return _env.get_template(f"{name}.html").render(**context)


def render_verification_page(title: str = "Notice", message: str = "", cta_text: str = "Home", cta_href: str = "/") -> str:
    """Standalone HTML page shown after following an e-mailed link."""
    context = _base_context()
    context.update(title=title, message=message, cta_text=cta_text, cta_href=cta_href)
    return _env.get_template("verification_page.html").render(**context)


@dataclass
class EmailResult:
    ok: bool
    info: Optional[str] = None
    error: Optional[str] = None


class EmailService:
    """SMTP sender for templated mail."""

    def __init__(self, config: SMTPConfig) -> None:
        self.config = config

    def _deliver(self, message: EmailMessage) -> str:
        if self.config.secure:
            client = smtplib.SMTP_SSL(self.config.host, self.config.port, timeout=15, context=ssl.create_default_context())
        else:
            client = smtplib.SMTP(self.config.host, self.config.port, timeout=15)
        with client as server:
            if not self.config.secure:
                server.starttls(context=ssl.create_default_context())
            server.login(self.config.user, self.config.password)
            server.send_message(message)
        return message["Message-ID"] or "sent"

    async def send(
        self, to: str, subject: str, template: str = "default", variables: Optional[Dict[str, Any]] = None
    ) -> EmailResult:
        """Render and send one message.

        Args:
            to: Recipient address
            subject: Subject line
            template: Template name from ``TEMPLATES``
            variables: Template variables; ``plain_text`` or ``message`` become the text part

        Returns:
            EmailResult describing the delivery outcome
        """
        variables = dict(variables or {})
        variables.setdefault("subject", subject)
        html = render_template(template, variables)
        text = variables.get("plain_text") or variables.get("message") or subject

        if not self.config.configured:
            logger.warning("No SMTP server configured; email not sent")
            logger.info(f"Email preview to={to} subject={subject!r}")
            logger.debug(html)
            return EmailResult(ok=False, info="no-transporter")

        message = EmailMessage()
        message["From"] = self.config.from_address
        message["To"] = to
        message["Subject"] = subject
        message.set_content(str(text))
        message.add_alternative(html, subtype="html")

        try:
            info = await run_in_threadpool(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Sending email to {to} failed: {e}")
            return EmailResult(ok=False, error=str(e))
        logger.info(f"Email sent to {to}: {subject}")
        return EmailResult(ok=True, info=info)


@lru_cache(maxsize=1)
def get_email_service() -> EmailService:
    """Dependency returning the process-wide e-mail service."""
    return EmailService(settings.smtp)
