"""Unit tests for the upload orchestrator."""

from datetime import date

import pytest

from vault_wizard.errors import UploadInProgressError, ValidationError, WriteError
from vault_wizard.secrets.grouper import group_secrets
from vault_wizard.secrets.models import SecretRecord
from vault_wizard.upload.orchestrator import UploadOrchestrator, UploadStatus


@pytest.mark.unit
class TestUploadOrchestratorUnit:
    """Unit tests for sequential secret upload."""

    def test_load_creates_pending_results(self, mock_vault, sample_records):
        """Test loading records gives one pending result per secret name."""
        orchestrator = UploadOrchestrator(mock_vault)

        results = orchestrator.load(sample_records)

        assert [r.secret_name for r in results] == ["api", "web"]
        assert all(r.status == UploadStatus.PENDING for r in results)
        assert orchestrator.progress == 0.0

    @pytest.mark.asyncio
    async def test_upload_all_succeed(self, mock_vault, token_config, sample_records):
        """Test every bundle is written with its grouped data."""
        orchestrator = UploadOrchestrator(mock_vault)

        results = await orchestrator.upload(token_config, sample_records)

        assert [(r.secret_name, r.status, r.message) for r in results] == [
            ("api", UploadStatus.SUCCESS, "Successfully stored"),
            ("web", UploadStatus.SUCCESS, "Successfully stored"),
        ]
        first_call = mock_vault.write_secret.await_args_list[0]
        assert first_call.args == (
            "https://vault.example.com",
            "kv/data/app",
            None,
            "hvs.test-token",
            "api",
            {"db_url": "postgres://x", "api_key": "sk-1"},
        )
        assert orchestrator.progress == 100.0
        assert orchestrator.is_complete is True

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_going(self, make_recording_vault, token_config):
        """Test a 500 on the second secret is recorded and the batch completes."""
        backend = make_recording_vault(failures={
            "web": WriteError("HTTP 500: disk full", status=500, body="disk full"),
        })
        records = [
            SecretRecord(name="api", key="k", value="v"),
            SecretRecord(name="web", key="k", value="v"),
        ]
        orchestrator = UploadOrchestrator(backend)

        results = await orchestrator.upload(token_config, records)

        assert results[0].status == UploadStatus.SUCCESS
        assert results[0].message == "Successfully stored"
        assert results[1].status == UploadStatus.ERROR
        assert "500" in results[1].message
        assert "disk full" in results[1].message
        assert orchestrator.progress == 100.0

        summary = orchestrator.summary()
        assert summary.succeeded == 1
        assert summary.failed == 1
        assert summary.pending == 0

    @pytest.mark.asyncio
    async def test_final_counts_include_last_item(self, make_recording_vault, token_config):
        """Test the summary right after upload counts the last secret too."""
        backend = make_recording_vault(failures={"c": WriteError("boom")})
        records = [SecretRecord(name=n, key="k", value="v") for n in "abc"]
        orchestrator = UploadOrchestrator(backend)

        await orchestrator.upload(token_config, records)
        summary = orchestrator.summary()

        assert (summary.succeeded, summary.failed) == (2, 1)

    @pytest.mark.asyncio
    async def test_writes_are_strictly_sequential(self, recording_vault, token_config):
        """Test each write finishes before the next one starts."""
        records = [SecretRecord(name=n, key="k", value="v") for n in ["A", "B", "C"]]
        orchestrator = UploadOrchestrator(recording_vault)

        await orchestrator.upload(token_config, records)

        assert recording_vault.events == [
            ("start", "A"), ("end", "A"),
            ("start", "B"), ("end", "B"),
            ("start", "C"), ("end", "C"),
        ]

    @pytest.mark.asyncio
    async def test_results_match_bundle_names(self, recording_vault, token_config):
        """Test there is exactly one result per grouped secret name."""
        records = [
            SecretRecord(name="x", key="a", value="1"),
            SecretRecord(name="y", key="a", value="1"),
            SecretRecord(name="x", key="b", value="2"),
            SecretRecord(name="z", key="a", value="1"),
            SecretRecord(name="y", key="a", value="3"),
        ]
        orchestrator = UploadOrchestrator(recording_vault)

        results = await orchestrator.upload(token_config, records)

        names = [r.secret_name for r in results]
        assert len(names) == len(set(names))
        assert set(names) == set(group_secrets(records))
        assert recording_vault.writes[1]["bundle"] == {"a": "3"}

    @pytest.mark.asyncio
    async def test_progress_reported_after_each_item(self, mock_vault, token_config):
        """Test progress callbacks receive completed / total percentages."""
        records = [SecretRecord(name=n, key="k", value="v") for n in "abcd"]
        seen = []
        orchestrator = UploadOrchestrator(mock_vault)

        await orchestrator.upload(token_config, records, on_progress=seen.append)

        assert seen == [25.0, 50.0, 75.0, 100.0]

    @pytest.mark.asyncio
    async def test_async_progress_callback(self, mock_vault, token_config, sample_records):
        """Test coroutine progress callbacks are awaited."""
        seen = []

        async def on_progress(value):
            seen.append(value)

        await UploadOrchestrator(mock_vault).upload(token_config, sample_records, on_progress=on_progress)

        assert seen == [50.0, 100.0]

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_item_error(self, mock_vault, token_config, sample_records):
        """Test non-Vault exceptions still only fail their own item."""
        mock_vault.write_secret.side_effect = [RuntimeError("socket closed"), None]
        orchestrator = UploadOrchestrator(mock_vault)

        results = await orchestrator.upload(token_config, sample_records)

        assert results[0].status == UploadStatus.ERROR
        assert results[0].message == "socket closed"
        assert results[1].status == UploadStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_upload_rejected_while_running(self, mock_vault, token_config, sample_records):
        """Test a second upload cannot start during the first."""
        orchestrator = UploadOrchestrator(mock_vault)
        orchestrator.is_uploading = True

        with pytest.raises(UploadInProgressError):
            await orchestrator.upload(token_config, sample_records)

    def test_load_rejected_while_running(self, mock_vault, sample_records):
        """Test pending results cannot be swapped out during an upload."""
        orchestrator = UploadOrchestrator(mock_vault)
        orchestrator.load(sample_records)
        orchestrator.is_uploading = True

        with pytest.raises(UploadInProgressError):
            orchestrator.load([SecretRecord(name="b", key="k", value="v")])
        assert [r.secret_name for r in orchestrator.results] == ["api", "web"]

    @pytest.mark.asyncio
    async def test_reset_returns_everything_to_pending(self, make_recording_vault, token_config, sample_records):
        """Test reset clears statuses, messages and progress."""
        backend = make_recording_vault(failures={"web": WriteError("HTTP 500: x", status=500, body="x")})
        orchestrator = UploadOrchestrator(backend)
        await orchestrator.upload(token_config, sample_records)

        orchestrator.reset()

        assert all(r.status == UploadStatus.PENDING and r.message is None for r in orchestrator.results)
        assert orchestrator.progress == 0.0
        assert orchestrator.is_complete is False
        assert [r.secret_name for r in orchestrator.results] == ["api", "web"]

    @pytest.mark.asyncio
    async def test_report_csv(self, make_recording_vault, token_config):
        """Test the report has a plain header and quoted values."""
        backend = make_recording_vault(failures={
            "web": WriteError('HTTP 400: {"errors":["bad"]}', status=400, body='{"errors":["bad"]}'),
        })
        records = [
            SecretRecord(name="api", key="k", value="v"),
            SecretRecord(name="web", key="k", value="v"),
        ]
        orchestrator = UploadOrchestrator(backend)
        await orchestrator.upload(token_config, records)

        report = orchestrator.report()

        assert report.splitlines() == [
            "Secret Name,Status,Message",
            '"api","success","Successfully stored"',
            '"web","error","HTTP 400: {""errors"":[""bad""]}"',
        ]

    def test_report_pending_rows_have_empty_message(self, mock_vault, sample_records):
        """Test pending results export with an empty message."""
        orchestrator = UploadOrchestrator(mock_vault)
        orchestrator.load(sample_records)

        assert orchestrator.report().splitlines()[1] == '"api","pending",""'

    def test_report_requires_results(self, mock_vault):
        """Test an empty result list cannot be exported."""
        with pytest.raises(ValidationError):
            UploadOrchestrator(mock_vault).report()

    def test_report_filename(self):
        """Test the report filename carries the date."""
        assert UploadOrchestrator.report_filename(date(2024, 5, 1)) == "vault-upload-report-2024-05-01.csv"

    @pytest.mark.asyncio
    async def test_upload_groups_records_once(self, mock_vault, token_config, sample_records, monkeypatch):
        """Test an upload groups its records a single time."""
        calls = []

        def counting_group(records):
            calls.append(len(records))
            return group_secrets(records)

        monkeypatch.setattr("vault_wizard.upload.orchestrator.group_secrets", counting_group)

        results = await UploadOrchestrator(mock_vault).upload(token_config, sample_records)

        assert calls == [3]
        assert [r.secret_name for r in results] == ["api", "web"]
