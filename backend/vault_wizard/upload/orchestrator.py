"""Sequential upload of grouped secrets to Vault."""

import csv
import inspect
import io
import time
from collections.abc import Awaitable, Callable, Sequence
from datetime import date
from enum import Enum

import structlog
from pydantic import BaseModel

from ..errors import UploadInProgressError, ValidationError, WriteError
from ..secrets.grouper import group_secrets
from ..secrets.models import SecretBundle, SecretRecord
from ..utils.logging import log_business_event, log_error, log_performance
from ..vault.client import VaultBackend, vault_client
from ..wizard.models import SessionConfig

logger = structlog.get_logger("upload.orchestrator")

SUCCESS_MESSAGE = "Successfully stored"
REPORT_HEADER = ("Secret Name", "Status", "Message")

ProgressCallback = Callable[[float], Awaitable[None] | None]


class UploadStatus(str, Enum):
    """Per-secret upload status."""
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class UploadResult(BaseModel):
    """Upload outcome for one secret name."""
    secret_name: str
    status: UploadStatus = UploadStatus.PENDING
    message: str | None = None


class UploadSummary(BaseModel):
    """Aggregate counts over all upload results."""
    total: int
    succeeded: int
    failed: int
    pending: int
    progress: float
    is_uploading: bool
    is_complete: bool


class UploadOrchestrator:
    """Writes each secret bundle through the Vault backend, one at a time.

    Every write is awaited before the next begins, so results complete in
    input order. A failed write marks only its own result as an error;
    the batch always runs to the end. Nothing is retried until ``reset``
    and a new ``upload``.
    """

    def __init__(self, backend: VaultBackend | None = None):
        """Initialize orchestrator with a Vault backend."""
        self._backend = backend or vault_client
        self.results: list[UploadResult] = []
        self.progress: float = 0.0
        self.is_uploading = False
        self.is_complete = False

    def load(self, records: Sequence[SecretRecord]) -> list[UploadResult]:
        """Create one pending result per secret name, in first-seen order."""
        if self.is_uploading:
            raise UploadInProgressError("Cannot replace secrets while an upload is running")
        self._reset_results(group_secrets(records))
        return self.results

    def _reset_results(self, bundle: SecretBundle) -> None:
        self.results = [UploadResult(secret_name=name) for name in bundle]
        self.progress = 0.0
        self.is_complete = False

    async def upload(
        self,
        config: SessionConfig,
        records: Sequence[SecretRecord],
        on_progress: ProgressCallback | None = None
    ) -> list[UploadResult]:
        """Upload every secret bundle and return the per-name results."""
        if self.is_uploading:
            raise UploadInProgressError("An upload is already running for this session")

        bundle = group_secrets(records)
        self._reset_results(bundle)
        results_by_name = {result.secret_name: result for result in self.results}
        total = len(bundle)

        self.is_uploading = True
        start_time = time.time()
        logger.info("Upload started", secret_count=total, secrets_path=config.secrets_path)

        try:
            for completed, (name, data) in enumerate(bundle.items(), start=1):
                result = results_by_name[name]

                try:
                    await self._backend.write_secret(
                        config.server_url,
                        config.secrets_path,
                        config.namespace,
                        config.token,
                        name,
                        data
                    )
                    result.status = UploadStatus.SUCCESS
                    result.message = SUCCESS_MESSAGE

                except WriteError as e:
                    result.status = UploadStatus.ERROR
                    result.message = e.message

                except Exception as e:
                    log_error(e, secret_name=name, operation="write_secret")
                    result.status = UploadStatus.ERROR
                    result.message = str(e) or type(e).__name__

                self.progress = completed / total * 100
                await self._notify(on_progress, self.progress)

        finally:
            self.is_uploading = False

        self.progress = 100.0
        self.is_complete = True

        log_performance("secret_upload", time.time() - start_time, secret_count=total)

        summary = self.summary()
        log_business_event("secrets_uploaded",
                           total=summary.total,
                           succeeded=summary.succeeded,
                           failed=summary.failed)
        return self.results

    def reset(self) -> None:
        """Return every result to pending and progress to zero."""
        for result in self.results:
            result.status = UploadStatus.PENDING
            result.message = None
        self.progress = 0.0
        self.is_complete = False
        logger.info("Upload results reset", secret_count=len(self.results))

    def summary(self) -> UploadSummary:
        """Aggregate counts over the current results."""
        succeeded = sum(1 for r in self.results if r.status == UploadStatus.SUCCESS)
        failed = sum(1 for r in self.results if r.status == UploadStatus.ERROR)
        return UploadSummary(
            total=len(self.results),
            succeeded=succeeded,
            failed=failed,
            pending=len(self.results) - succeeded - failed,
            progress=round(self.progress, 2),
            is_uploading=self.is_uploading,
            is_complete=self.is_complete
        )

    def report(self) -> str:
        """Serialize results as CSV with every value double-quoted."""
        if not self.results:
            raise ValidationError("There are no upload results to report", code="EMPTY_REPORT")

        buffer = io.StringIO()
        buffer.write(",".join(REPORT_HEADER) + "\n")
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for result in self.results:
            writer.writerow([result.secret_name, result.status.value, result.message or ""])
        return buffer.getvalue()

    @staticmethod
    def report_filename(today: date | None = None) -> str:
        """Download filename for the report."""
        return f"vault-upload-report-{(today or date.today()).isoformat()}.csv"

    @staticmethod
    async def _notify(callback: ProgressCallback | None, progress: float) -> None:
        if callback is None:
            return
        outcome = callback(progress)
        if inspect.isawaitable(outcome):
            await outcome
