"""Secret upload endpoints."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Response

from ...errors import UploadInProgressError
from ...wizard.session import WizardSession
from ..deps import get_session, wizard_controller

router = APIRouter()
logger = structlog.get_logger("api.upload")


def _upload_view(session: WizardSession) -> dict[str, Any]:
    orchestrator = session.orchestrator
    return {
        "results": [result.model_dump(mode="json") for result in orchestrator.results],
        "summary": orchestrator.summary().model_dump(),
    }


@router.post("/{session_id}/upload")
async def run_upload(session: WizardSession = Depends(get_session)) -> dict[str, Any]:
    """Upload every secret to Vault, one secret name at a time."""
    logger.info("Upload requested", session_id=session.session_id, record_count=len(session.records))
    await wizard_controller.upload(session)
    return _upload_view(session)


@router.get("/{session_id}/upload")
async def upload_status(session: WizardSession = Depends(get_session)) -> dict[str, Any]:
    """Per-secret results and progress of the current upload."""
    return _upload_view(session)


@router.post("/{session_id}/upload/reset")
async def reset_upload(session: WizardSession = Depends(get_session)) -> dict[str, Any]:
    """Return every result to pending so the batch can be re-run."""
    if session.orchestrator.is_uploading:
        raise UploadInProgressError("Cannot reset while an upload is running")
    logger.info("Upload reset requested", session_id=session.session_id)
    session.orchestrator.reset()
    return _upload_view(session)


@router.get("/{session_id}/upload/report")
async def download_report(session: WizardSession = Depends(get_session)) -> Response:
    """Download the upload results as CSV."""
    orchestrator = session.orchestrator
    content = orchestrator.report()
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{orchestrator.report_filename()}"'}
    )
