"""Issue download orchestrator.

Drives one issue from metadata to a persisted, unlocked PDF:
skip check, metadata, sequential page fetch, sequencing, decrypt and
merge, atomic persist.
"""

import logging
from collections.abc import Iterator
from enum import Enum
from pathlib import Path
from typing import Protocol

import httpx

from zinio_distiller.assembly import (
    AssemblyError,
    AtomicPersister,
    DecryptedPageSet,
    DocumentMerger,
    EmptyIssueError,
    IssueDownloadError,
    PageDecryptor,
    PageFetcher,
    PageSequencer,
    RunContext,
)
from zinio_distiller.clients import ClientError
from schemas.issue import Issue, PageIndexError
from schemas.page import Page
from schemas.session import Session

logger = logging.getLogger(__name__)


class IssueState(str, Enum):
    """Lifecycle of one issue download."""

    PENDING = "pending"
    METADATA_FETCHED = "metadata_fetched"
    PAGES_FETCHED = "pages_fetched"
    MERGED = "merged"
    PERSISTED = "persisted"
    FAILED = "failed"


class MetadataClient(Protocol):
    def get_issue(self, session: Session, magazine_id: str, issue_id: str) -> Issue: ...


class IssueDownloadOrchestrator:
    """Downloads one issue into a single unlocked PDF.

    All page, decrypted and merged state lives inside a single
    download_issue() call, so independent issues can run on separate
    orchestrators (or threads) as long as their destinations differ.

    Attributes:
        metadata_client: Source of Issue metadata (e.g. ZinioClient)
        fetcher: PageFetcher for page containers
        sequencer: PageSequencer applying the page order policy
        decryptor: PageDecryptor unlocking page containers
        merger: DocumentMerger concatenating sub-pages
        persister: AtomicPersister writing the result
    """

    def __init__(
        self,
        metadata_client: MetadataClient,
        fetcher: PageFetcher | None = None,
        sequencer: PageSequencer | None = None,
        decryptor: PageDecryptor | None = None,
        merger: DocumentMerger | None = None,
        persister: AtomicPersister | None = None,
    ):
        self.metadata_client = metadata_client
        self.fetcher = fetcher or PageFetcher()
        self.sequencer = sequencer or PageSequencer()
        self.decryptor = decryptor or PageDecryptor()
        self.merger = merger or DocumentMerger()
        self.persister = persister or AtomicPersister()

    def download_issue(
        self,
        context: RunContext,
        session: Session,
        magazine_id: str,
        issue_id: str,
        destination: Path,
    ) -> bool:
        """Download, unlock and save one issue.

        Args:
            context: Run context; cancellation stops further page fetches
            session: Authenticated session for the metadata client
            magazine_id: Magazine identifier
            issue_id: Issue identifier
            destination: Final path of the output PDF

        Returns:
            True if the destination already existed and the issue was
            skipped, False if a new file was written

        Raises:
            IssueDownloadError: If any stage fails. Nothing is written to
                                the destination in that case.
        """
        destination = Path(destination)
        if self.persister.exists(destination):
            logger.info(f"Issue {issue_id} already downloaded to {destination}")
            return True

        state = IssueState.PENDING
        try:
            logger.info(f"Downloading metadata for issue {issue_id}")
            issue = self.metadata_client.get_issue(session, magazine_id, issue_id)
            state = IssueState.METADATA_FETCHED

            if issue.page_count == 0:
                raise EmptyIssueError(f"Issue {issue_id} has no pages")

            logger.info(f"Downloading {issue.page_count} pages of {issue.title}")
            pages = self._fetch_pages(context, issue, magazine_id, state)
            state = IssueState.PAGES_FETCHED

            ordered = self.sequencer.sequence(pages)
            password = issue.password.get_secret_value().encode("utf-8")

            logger.info(f"Unlocking and merging {issue.title}")
            with self.merger.merge(
                self._decrypt_pages(ordered, password, issue.id)
            ) as merged:
                state = IssueState.MERGED
                logger.info(f"Saving {issue.title} to {destination}")
                written = self.persister.persist(merged, destination)
            state = IssueState.PERSISTED

        except IssueDownloadError:
            raise
        except (AssemblyError, ClientError, httpx.HTTPError) as e:
            raise IssueDownloadError(
                f"Failed to download issue {issue_id} of magazine {magazine_id} "
                f"after {state.value}: {e}",
                magazine_id=magazine_id,
                issue_id=issue_id,
                page_index=getattr(e, "page_index", None),
                state=state.value,
            ) from e

        return not written

    def _fetch_pages(
        self,
        context: RunContext,
        issue: Issue,
        magazine_id: str,
        state: IssueState,
    ) -> list[Page]:
        """Fetch every page container in index order, stopping at the first failure."""
        pages: list[Page] = []

        for index in range(issue.page_count):
            try:
                context.check()
                url = issue.page_url(index)
                pages.append(Page(index=index, content=self.fetcher.fetch(context, url)))
            except (AssemblyError, PageIndexError) as e:
                raise IssueDownloadError(
                    f"Failed to download page {index} of issue {issue.id}: {e}",
                    magazine_id=magazine_id,
                    issue_id=issue.id,
                    page_index=index,
                    state=state.value,
                ) from e
            logger.debug(f"Fetched page {index + 1}/{issue.page_count} of {issue.id}")

        return pages

    def _decrypt_pages(
        self, pages: list[Page], password: bytes, issue_id: str
    ) -> Iterator[DecryptedPageSet]:
        """Decrypt pages lazily, closing each set once it has been merged."""
        for page in pages:
            with self.decryptor.decrypt(page, password, issue_id) as page_set:
                yield page_set
