"""Alerting service for release pipeline incidents."""

import smtplib
from dataclasses import dataclass, field
from datetime import UTC, datetime
from email.mime.text import MIMEText
from enum import StrEnum
from typing import Any

import httpx

from dramacast.config import settings
from dramacast.logging import get_logger

logger = get_logger(__name__)


class AlertSeverity(StrEnum):
    """Alert severity levels."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class Alert:
    """An alert to be sent via configured channels."""

    title: str
    message: str
    severity: AlertSeverity = AlertSeverity.ERROR
    context: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def subject(self) -> str:
        return f"[{self.severity.value.upper()}] {self.title}"


class AlertingService:
    """Sends alerts to a Discord webhook and/or SMTP email.

    Delivery failures are logged and swallowed: alerting must never take down
    the release scheduler.
    """

    DISCORD_COLORS = {
        AlertSeverity.INFO: 0x3498DB,  # Blue
        AlertSeverity.WARNING: 0xF39C12,  # Orange
        AlertSeverity.ERROR: 0xE74C3C,  # Red
        AlertSeverity.CRITICAL: 0x9B59B6,  # Purple
    }

    def __init__(self) -> None:
        self.discord_webhook_url = settings.alert_discord_webhook_url
        self.email_enabled = bool(
            settings.alert_email_smtp_host and settings.alert_email_from and settings.alert_email_to
        )

    def send_alert(self, alert: Alert) -> bool:
        """Send an alert via all configured channels.

        Returns:
            True if at least one channel succeeded
        """
        results = []

        if self.discord_webhook_url:
            try:
                results.append(self._send_discord(alert))
            except Exception as e:
                logger.error("discord_alert_failed", error=str(e))
                results.append(False)

        if self.email_enabled:
            try:
                results.append(self._send_email(alert))
            except Exception as e:
                logger.error("email_alert_failed", error=str(e))
                results.append(False)

        if not results:
            logger.debug("alert_not_sent_no_channels", title=alert.title)
        return any(results)

    def _send_discord(self, alert: Alert) -> bool:
        fields = [
            {"name": key.replace("_", " ").title(), "value": str(value)[:200], "inline": True}
            for key, value in alert.context.items()
        ]
        payload = {
            "embeds": [
                {
                    "title": alert.subject,
                    "description": alert.message,
                    "color": self.DISCORD_COLORS.get(alert.severity, 0xE74C3C),
                    "fields": fields[:25],  # Discord limit
                    "timestamp": alert.timestamp.isoformat(),
                    "footer": {"text": "dramacast release scheduler"},
                }
            ]
        }

        with httpx.Client(timeout=10.0) as client:
            response = client.post(self.discord_webhook_url, json=payload)
            response.raise_for_status()

        logger.info("discord_alert_sent", severity=alert.severity.value, title=alert.title)
        return True

    def _send_email(self, alert: Alert) -> bool:
        context = "\n".join(f"  {k}: {v}" for k, v in alert.context.items())
        body = (
            f"{alert.title}\n"
            f"Severity: {alert.severity.value.upper()}\n"
            f"Time: {alert.timestamp.isoformat()}\n\n"
            f"{alert.message}\n\n"
            f"Context:\n{context}\n"
        )

        msg = MIMEText(body, "plain")
        msg["Subject"] = alert.subject
        msg["From"] = settings.alert_email_from
        msg["To"] = ", ".join(settings.alert_email_to)

        with smtplib.SMTP(settings.alert_email_smtp_host, settings.alert_email_smtp_port) as server:
            server.starttls()
            if settings.alert_email_username and settings.alert_email_password:
                server.login(settings.alert_email_username, settings.alert_email_password)
            server.sendmail(settings.alert_email_from, settings.alert_email_to, msg.as_string())

        logger.info(
            "email_alert_sent",
            severity=alert.severity.value,
            title=alert.title,
            recipients=len(settings.alert_email_to),
        )
        return True


def alert_storage_exhausted(
    service: AlertingService,
    stage: str,
    failed_ids: list[str],
    error: str,
) -> bool:
    """Raise a critical alert for a release batch aborted on a full disk.

    Args:
        service: Alerting service to deliver through
        stage: Which promoter aborted (series, episodes)
        failed_ids: Ids of the records that hit the error
        error: Error message from the store
    """
    if not settings.alert_on_storage_exhausted:
        return False

    alert = Alert(
        title=f"Release batch aborted: storage full ({stage})",
        message=(
            "The scheduled release pipeline stopped because the catalog store is out of "
            "space. Remaining records stay pending and are retried on the next tick once "
            "space is freed."
        ),
        severity=AlertSeverity.CRITICAL,
        context={
            "stage": stage,
            "failed_ids": ", ".join(failed_ids) or "-",
            "error": error,
        },
    )
    return service.send_alert(alert)
