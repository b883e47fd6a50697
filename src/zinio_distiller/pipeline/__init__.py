"""Issue download pipeline."""

from .batch import BatchReport, IssueResult, download_all_issues
from .naming import sanitize_filename
from .orchestrator import IssueDownloadOrchestrator, IssueState

__all__ = [
    "BatchReport",
    "IssueDownloadOrchestrator",
    "IssueResult",
    "IssueState",
    "download_all_issues",
    "sanitize_filename",
]
