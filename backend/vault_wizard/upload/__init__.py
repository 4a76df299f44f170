"""Secret upload orchestration."""

from .orchestrator import UploadOrchestrator, UploadResult, UploadStatus, UploadSummary

__all__ = ["UploadOrchestrator", "UploadResult", "UploadStatus", "UploadSummary"]
