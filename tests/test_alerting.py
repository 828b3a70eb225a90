"""Tests for the alerting service."""

from unittest.mock import MagicMock, patch

from dramacast.services.alerting import (
    Alert,
    AlertingService,
    AlertSeverity,
    alert_storage_exhausted,
)


def test_alert_subject() -> None:
    alert = Alert(title="Disk full", message="m", severity=AlertSeverity.CRITICAL)

    assert alert.subject == "[CRITICAL] Disk full"


def test_no_channels_configured() -> None:
    """Without a webhook or SMTP host nothing is sent."""
    service = AlertingService()
    service.discord_webhook_url = None
    service.email_enabled = False

    assert service.send_alert(Alert(title="t", message="m")) is False


def test_discord_webhook_payload() -> None:
    service = AlertingService()
    service.discord_webhook_url = "https://discord.example/webhook"
    service.email_enabled = False

    with patch("dramacast.services.alerting.httpx.Client") as client_cls:
        client = client_cls.return_value.__enter__.return_value
        sent = service.send_alert(
            Alert(
                title="Disk full",
                message="m",
                severity=AlertSeverity.CRITICAL,
                context={"failed_ids": "a, b"},
            )
        )

    assert sent is True
    url = client.post.call_args.args[0]
    payload = client.post.call_args.kwargs["json"]
    assert url == "https://discord.example/webhook"
    embed = payload["embeds"][0]
    assert embed["title"] == "[CRITICAL] Disk full"
    assert embed["color"] == AlertingService.DISCORD_COLORS[AlertSeverity.CRITICAL]
    assert embed["fields"][0] == {"name": "Failed Ids", "value": "a, b", "inline": True}


def test_discord_failure_is_swallowed() -> None:
    """Delivery errors are logged and reported as not sent."""
    service = AlertingService()
    service.discord_webhook_url = "https://discord.example/webhook"
    service.email_enabled = False

    with patch("dramacast.services.alerting.httpx.Client") as client_cls:
        client_cls.return_value.__enter__.return_value.post.side_effect = RuntimeError("down")
        assert service.send_alert(Alert(title="t", message="m")) is False


def test_storage_exhausted_alert() -> None:
    service = MagicMock(spec=AlertingService)
    service.send_alert.return_value = True

    sent = alert_storage_exhausted(
        service, stage="episodes", failed_ids=["abc"], error="No space left on device"
    )

    assert sent is True
    alert = service.send_alert.call_args.args[0]
    assert alert.severity == AlertSeverity.CRITICAL
    assert "episodes" in alert.title
    assert alert.context == {
        "stage": "episodes",
        "failed_ids": "abc",
        "error": "No space left on device",
    }


def test_storage_exhausted_alert_disabled(monkeypatch) -> None:
    from dramacast.services import alerting

    monkeypatch.setattr(alerting.settings, "alert_on_storage_exhausted", False)
    service = MagicMock(spec=AlertingService)

    assert alert_storage_exhausted(service, stage="series", failed_ids=[], error="x") is False
    service.send_alert.assert_not_called()
