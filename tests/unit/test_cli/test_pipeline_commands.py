"""Tests for the reminder, digest and config CLI commands.

Testing approach:
- Uses Click's CliRunner for command invocation
- Patches the pipeline service builders so no push service or database is needed
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner
import pytest

from taskdesk_service.cli.commands import _services
from taskdesk_service.cli.main import cli
from taskdesk_service.core.settings import PipelineSettings
from taskdesk_service.features.digests.models import DigestType
from taskdesk_service.features.pipeline.schemas import (
    DigestGenerateResponse,
    ReminderProcessResponse,
    UserDigestResult,
)

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def cli_runner():
    return CliRunner()


def fake_service(**methods):
    service = MagicMock()
    for name, value in methods.items():
        setattr(service, name, AsyncMock(**value))
    return service


@pytest.mark.unit
class TestRemindersProcess:
    def test_prints_batch_counts(self, cli_runner):
        result_model = ReminderProcessResponse(
            processed=4, sent=2, failed=1, cancelled=1, timestamp=NOW, duration_ms=37,
        )
        service = fake_service(process_reminders={"return_value": result_model})

        with patch("taskdesk_service.cli.commands.reminders.pipeline_service", return_value=service):
            result = cli_runner.invoke(cli, ["reminders", "process"])

        assert result.exit_code == 0
        assert "Due:       4" in result.output
        assert "Sent:      2" in result.output
        assert "Cancelled: 1" in result.output
        assert "1 reminder(s) left pending" in result.output

    def test_scan_failure_exits_nonzero(self, cli_runner):
        service = fake_service(process_reminders={"side_effect": RuntimeError("no such table")})

        with patch("taskdesk_service.cli.commands.reminders.pipeline_service", return_value=service):
            result = cli_runner.invoke(cli, ["reminders", "process"])

        assert result.exit_code == 1
        assert "Reminder scan failed: no such table" in result.output

    def test_missing_push_credentials_exit_nonzero(self, cli_runner):
        result = cli_runner.invoke(cli, ["reminders", "process"])

        assert result.exit_code == 1
        assert "missing" in result.output


@pytest.mark.unit
class TestDigestsCommands:
    def test_generate_lists_users(self, cli_runner):
        result_model = DigestGenerateResponse(
            digest_type=DigestType.MORNING,
            users=2,
            generated=1,
            reused=0,
            notified=1,
            failed=1,
            timestamp=NOW,
            duration_ms=120,
            results=[
                UserDigestResult(user_name="alice", status="generated", notified=True),
                UserDigestResult(user_name="bob", status="failed", error="Summarization failed"),
            ],
        )
        service = fake_service(generate_digests={"return_value": result_model})

        with patch("taskdesk_service.cli.commands.digests.digest_pipeline_service", return_value=service):
            result = cli_runner.invoke(cli, ["digests", "generate", "--type", "morning"])

        assert result.exit_code == 0
        service.generate_digests.assert_awaited_once_with(DigestType.MORNING)
        assert "alice: generated (notified)" in result.output
        assert "bob: failed (Summarization failed)" in result.output
        assert "1 user(s) without a digest" in result.output

    def test_generate_with_notices_on_needs_push_credentials(self, cli_runner):
        result = cli_runner.invoke(cli, ["digests", "generate", "--type", "morning"])

        assert result.exit_code == 1
        assert "missing" in result.output

    def test_digest_pipeline_without_notices_skips_push(self):
        settings = PipelineSettings(api_key="key", notify_digest_ready=False)

        with (
            patch.object(_services, "get_pipeline_settings", return_value=settings),
            patch.object(_services, "build_push_transport") as build_transport,
        ):
            service = _services.digest_pipeline_service()

        build_transport.assert_not_called()
        assert service._push is None
        assert service._dispatcher is None

    def test_generate_rejects_unknown_type(self, cli_runner):
        result = cli_runner.invoke(cli, ["digests", "generate", "--type", "evening"])

        assert result.exit_code == 2

    def test_next_slot(self, cli_runner):
        result = cli_runner.invoke(cli, ["digests", "next-slot"])

        assert result.exit_code == 0
        assert " digest at " in result.output
        assert result.output.split()[0] in {"morning", "afternoon"}


@pytest.mark.unit
class TestConfigCheck:
    def test_reports_missing_push_credentials(self, cli_runner):
        result = cli_runner.invoke(cli, ["config", "check", "--skip-db"])

        assert result.exit_code == 1
        assert "Connection check skipped" in result.output
        assert "Not configured; digests cannot be generated" in result.output
        assert "API key configured" in result.output
        assert "missing" in result.output


@pytest.mark.unit
def test_version(cli_runner):
    result = cli_runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "1.0.0" in result.output
