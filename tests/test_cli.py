"""Tests for the command-line interface."""

from datetime import timedelta
from unittest.mock import MagicMock, patch
from uuid import uuid4

from typer.testing import CliRunner

from dramacast import __version__
from dramacast.cli import app
from dramacast.domain.enums import Collection
from dramacast.domain.models import (
    PromotionFailure,
    SeriesPromotionResult,
    TickReport,
    utc_now,
)

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_release_prints_table(now) -> None:
    scheduler = MagicMock()
    scheduler.run_tick.return_value = TickReport(
        started_at=now,
        finished_at=now,
        series=SeriesPromotionResult(promoted=[uuid4()]),
    )

    with patch("dramacast.cli._build_scheduler", return_value=scheduler):
        result = runner.invoke(app, ["release"])

    assert result.exit_code == 0
    assert "Release Tick" in result.stdout


def test_release_storage_exhausted_exit_code(now) -> None:
    """A batch aborted on a full disk exits with code 2."""
    failed_id = uuid4()
    scheduler = MagicMock()
    scheduler.run_tick.return_value = TickReport(
        started_at=now,
        finished_at=now,
        series=SeriesPromotionResult(
            failed=[PromotionFailure(id=failed_id, error="No space left on device")],
            aborted=True,
        ),
    )

    with patch("dramacast.cli._build_scheduler", return_value=scheduler):
        result = runner.invoke(app, ["release"])

    assert result.exit_code == 2
    assert str(failed_id) in result.stdout


def test_release_busy(now) -> None:
    scheduler = MagicMock()
    scheduler.run_tick.return_value = None

    with patch("dramacast.cli._build_scheduler", return_value=scheduler):
        result = runner.invoke(app, ["release"])

    assert result.exit_code == 1
    assert "already in progress" in result.stdout


def test_transfers_empty(store) -> None:
    with patch("dramacast.adapters.catalog.get_catalog_store", return_value=store):
        result = runner.invoke(app, ["transfers"])

    assert result.exit_code == 0
    assert "No series transfers yet" in result.stdout


def test_transfers_lists_entries(store, now) -> None:
    store.insert(
        Collection.TRANSFER_LOGS,
        {
            "id": uuid4(),
            "pending_series_id": uuid4(),
            "series_id": uuid4(),
            "title": "Nightfall",
            "scheduled_release_at": now,
            "transferred_at": now,
        },
    )

    with patch("dramacast.adapters.catalog.get_catalog_store", return_value=store):
        result = runner.invoke(app, ["transfers"])

    assert result.exit_code == 0
    assert "Nightfall" in result.stdout


def test_upcoming_lists_future_series(store, now, add_pending_series) -> None:
    add_pending_series(title="Nightfall", offset=utc_now() - now + timedelta(days=7))

    with patch("dramacast.adapters.catalog.get_catalog_store", return_value=store):
        result = runner.invoke(app, ["upcoming"])

    assert result.exit_code == 0
    assert "Nightfall" in result.stdout
