"""Batch download of every issue in a library."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from zinio_distiller.assembly import IssueDownloadError, RunContext
from zinio_distiller.pipeline.naming import sanitize_filename
from zinio_distiller.pipeline.orchestrator import IssueDownloadOrchestrator, IssueState
from schemas.magazine import IssueSummary, Magazine
from schemas.session import Session

logger = logging.getLogger(__name__)


@dataclass
class IssueResult:
    """Outcome of one issue in a batch.

    Attributes:
        magazine_id: Magazine identifier
        issue_id: Issue identifier
        destination: Output path of the issue
        state: Final state (persisted or failed)
        skipped: True if the output already existed
        error: Error message for failed issues
    """

    magazine_id: str
    issue_id: str
    destination: Path
    state: IssueState
    skipped: bool = False
    error: str | None = None


@dataclass
class BatchReport:
    """Results of a batch run, in processing order."""

    results: list[IssueResult] = field(default_factory=list)

    @property
    def downloaded(self) -> list[IssueResult]:
        return [
            r for r in self.results if r.state == IssueState.PERSISTED and not r.skipped
        ]

    @property
    def skipped(self) -> list[IssueResult]:
        return [r for r in self.results if r.skipped]

    @property
    def failed(self) -> list[IssueResult]:
        return [r for r in self.results if r.state == IssueState.FAILED]


def magazine_directory(output_dir: Path, magazine: Magazine) -> Path:
    return output_dir / (sanitize_filename(magazine.title) or magazine.id)


def issue_destination(directory: Path, issue: IssueSummary) -> Path:
    return directory / f"{sanitize_filename(issue.title) or issue.id}.pdf"


def download_all_issues(
    context: RunContext,
    orchestrator: IssueDownloadOrchestrator,
    session: Session,
    magazines: list[Magazine],
    output_dir: Path,
) -> BatchReport:
    """Download every issue of every magazine into per-magazine directories.

    A failed issue is logged and recorded; the batch moves on to the next
    one. Once the context is cancelled no further issue is started.

    Args:
        context: Run context shared by all issues
        orchestrator: Orchestrator used for each issue
        session: Authenticated session
        magazines: Library listing
        output_dir: Base output directory

    Returns:
        BatchReport with one IssueResult per attempted issue
    """
    report = BatchReport()

    for magazine in magazines:
        directory = magazine_directory(output_dir, magazine)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create directory {directory} for {magazine.title}: {e}")
            continue

        for summary in magazine.issues:
            if context.cancelled:
                logger.warning("Run cancelled, not starting further issues")
                return report

            destination = issue_destination(directory, summary)
            report.results.append(
                _download_one(context, orchestrator, session, magazine, summary, destination)
            )

    return report


def _download_one(
    context: RunContext,
    orchestrator: IssueDownloadOrchestrator,
    session: Session,
    magazine: Magazine,
    summary: IssueSummary,
    destination: Path,
) -> IssueResult:
    result = IssueResult(
        magazine_id=magazine.id,
        issue_id=summary.id,
        destination=destination,
        state=IssueState.PENDING,
    )
    label = f"{magazine.title} / {summary.title}"

    try:
        result.skipped = orchestrator.download_issue(
            context, session, magazine.id, summary.id, destination
        )
        result.state = IssueState.PERSISTED
        if result.skipped:
            logger.info(f"{label}: issue already downloaded")
        else:
            logger.info(f"{label}: saved to {destination}")
    except IssueDownloadError as e:
        result.state = IssueState.FAILED
        result.error = e.message
        logger.error(f"{label}: {e.message}")
    except Exception as e:
        result.state = IssueState.FAILED
        result.error = str(e)
        logger.error(f"{label}: unexpected error: {e}")

    return result
