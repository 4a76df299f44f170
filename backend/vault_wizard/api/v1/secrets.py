"""CSV secret file endpoints."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from ...config.settings import settings
from ...errors import ValidationError
from ...secrets.models import ParseResult, SecretRecord
from ...secrets.parser import csv_parser
from ...wizard.session import WizardSession
from ..deps import get_session, wizard_controller

router = APIRouter()
logger = structlog.get_logger("api.secrets")

PREVIEW_VALUE_LENGTH = 20


def _preview_value(value: str) -> str:
    if len(value) > PREVIEW_VALUE_LENGTH:
        return f"{value[:PREVIEW_VALUE_LENGTH]}..."
    return value


def _secrets_view(session: WizardSession, limit: int) -> dict[str, Any]:
    records: list[SecretRecord] = session.records
    return {
        "record_count": len(records),
        "secret_count": len(session.orchestrator.results),
        "errors": session.parse_errors,
        "preview": [
            {
                "line": record.line,
                "name": record.name,
                "key": record.key,
                "value": _preview_value(record.value),
            }
            for record in records[:limit]
        ],
    }


@router.post("/{session_id}/secrets")
async def upload_csv(
    file: UploadFile = File(..., description="CSV with SECRET_NAME,SECRET_KEY,SECRET_VALUE columns"),
    session: WizardSession = Depends(get_session)
) -> dict[str, Any]:
    """Parse an uploaded CSV file into the session's secrets."""

    filename = file.filename or ""
    if not filename.lower().endswith(".csv") and file.content_type != "text/csv":
        raise ValidationError("Please select a CSV file", code="NOT_CSV")

    data = await file.read(settings.max_csv_bytes + 1)
    if len(data) > settings.max_csv_bytes:
        logger.warning("CSV upload too large", session_id=session.session_id, limit=settings.max_csv_bytes)
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"CSV file exceeds {settings.max_csv_bytes} bytes"
        )

    parsed: ParseResult = csv_parser.parse_bytes(data)
    wizard_controller.load_secrets(session, parsed)

    return _secrets_view(session, limit=10)


@router.get("/{session_id}/secrets")
async def preview_secrets(
    limit: int = Query(10, ge=1, le=500),
    session: WizardSession = Depends(get_session)
) -> dict[str, Any]:
    """Preview the parsed secrets and any row errors."""
    return _secrets_view(session, limit=limit)


@router.delete("/{session_id}/secrets")
async def clear_secrets(session: WizardSession = Depends(get_session)) -> dict[str, Any]:
    """Remove the uploaded file's secrets from the session."""
    wizard_controller.load_secrets(session, ParseResult(records=[], errors=[]))
    return _secrets_view(session, limit=10)
