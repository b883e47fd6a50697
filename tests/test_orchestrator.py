"""Tests for IssueDownloadOrchestrator."""

from unittest.mock import MagicMock

import httpx
import pytest
from pydantic import SecretStr

from conftest import PAGE_URL_TEMPLATE, build_pdf, read_pdf_annotation_counts, read_pdf_texts
from zinio_distiller.assembly import (
    DecryptionFailedError,
    EmptyIssueError,
    FetchError,
    IssueDownloadError,
    PageFetcher,
    PersistError,
    RunContext,
)
from zinio_distiller.clients import NotFoundError, ValidationError, ZinioClient
from zinio_distiller.pipeline import IssueDownloadOrchestrator, IssueState


@pytest.fixture
def metadata_client(sample_issue):
    client = MagicMock()
    client.get_issue.return_value = sample_issue
    return client


@pytest.fixture
def orchestrator(metadata_client, page_server):
    return IssueDownloadOrchestrator(
        metadata_client, fetcher=PageFetcher(http_client=page_server.client())
    )


class TestDownloadIssue:
    def test_sample_issue_is_rotated_and_saved(
        self, orchestrator, metadata_client, page_server, session, tmp_path
    ):
        destination = tmp_path / "Sample.pdf"

        skipped = orchestrator.download_issue(
            RunContext(), session, "mag-7", "issue-42", destination
        )

        assert skipped is False
        assert read_pdf_texts(destination) == ["Page 1", "Page 2", "Page 0"]
        metadata_client.get_issue.assert_called_once_with(session, "mag-7", "issue-42")

    def test_pages_fetched_sequentially_in_index_order(
        self, orchestrator, page_server, session, tmp_path
    ):
        orchestrator.download_issue(
            RunContext(), session, "mag-7", "issue-42", tmp_path / "Sample.pdf"
        )

        assert page_server.requests == [PAGE_URL_TEMPLATE.format(index=i) for i in range(3)]

    def test_output_has_no_temp_file_and_no_annotations(
        self, metadata_client, page_server, session, tmp_path
    ):
        for i in range(3):
            page_server.pages[PAGE_URL_TEMPLATE.format(index=i)] = build_pdf(
                f"Page {i}", password="secret", annotate=True
            )
        orchestrator = IssueDownloadOrchestrator(
            metadata_client, fetcher=PageFetcher(http_client=page_server.client())
        )

        orchestrator.download_issue(
            RunContext(), session, "mag-7", "issue-42", tmp_path / "Sample.pdf"
        )

        assert [p.name for p in tmp_path.iterdir()] == ["Sample.pdf"]
        assert read_pdf_annotation_counts(tmp_path / "Sample.pdf") == [0, 0, 0]

    def test_multi_page_containers_keep_internal_order(
        self, metadata_client, page_server, session, tmp_path
    ):
        page_server.pages[PAGE_URL_TEMPLATE.format(index=0)] = build_pdf(
            "Back cover", password="secret"
        )
        page_server.pages[PAGE_URL_TEMPLATE.format(index=1)] = build_pdf(
            "Spread left", "Spread right", password="secret"
        )
        orchestrator = IssueDownloadOrchestrator(
            metadata_client, fetcher=PageFetcher(http_client=page_server.client())
        )

        orchestrator.download_issue(
            RunContext(), session, "mag-7", "issue-42", tmp_path / "Sample.pdf"
        )

        assert read_pdf_texts(tmp_path / "Sample.pdf") == [
            "Spread left",
            "Spread right",
            "Page 2",
            "Back cover",
        ]


class TestIdempotence:
    def test_existing_destination_skips_all_work(
        self, orchestrator, metadata_client, page_server, session, tmp_path
    ):
        destination = tmp_path / "Sample.pdf"
        orchestrator.download_issue(RunContext(), session, "mag-7", "issue-42", destination)
        first_run = destination.read_bytes()
        metadata_client.reset_mock()
        page_server.requests.clear()

        skipped = orchestrator.download_issue(
            RunContext(), session, "mag-7", "issue-42", destination
        )

        assert skipped is True
        assert page_server.requests == []
        metadata_client.get_issue.assert_not_called()
        assert destination.read_bytes() == first_run

    def test_skip_does_not_decrypt_or_merge(self, session, tmp_path):
        destination = tmp_path / "Sample.pdf"
        destination.write_bytes(b"done")
        decryptor = MagicMock()
        merger = MagicMock()
        orchestrator = IssueDownloadOrchestrator(
            MagicMock(), fetcher=MagicMock(), decryptor=decryptor, merger=merger
        )

        assert orchestrator.download_issue(
            RunContext(), session, "mag-7", "issue-42", destination
        ) is True
        decryptor.decrypt.assert_not_called()
        merger.merge.assert_not_called()


class TestFailures:
    def test_page_fetch_failure_aborts_issue(
        self, orchestrator, page_server, session, tmp_path
    ):
        page_server.failures[PAGE_URL_TEMPLATE.format(index=1)] = 500
        destination = tmp_path / "Sample.pdf"

        with pytest.raises(IssueDownloadError) as exc_info:
            orchestrator.download_issue(RunContext(), session, "mag-7", "issue-42", destination)

        error = exc_info.value
        assert error.page_index == 1
        assert error.issue_id == "issue-42"
        assert error.magazine_id == "mag-7"
        assert error.state == IssueState.METADATA_FETCHED.value
        assert isinstance(error.__cause__, FetchError)
        # Page 2 is never requested after page 1 fails.
        assert len(page_server.requests) == 2
        assert list(tmp_path.iterdir()) == []

    def test_wrong_password_writes_nothing(
        self, metadata_client, sample_issue, orchestrator, session, tmp_path
    ):
        metadata_client.get_issue.return_value = sample_issue.model_copy(
            update={"password": SecretStr("not-the-password")}
        )

        with pytest.raises(IssueDownloadError) as exc_info:
            orchestrator.download_issue(
                RunContext(), session, "mag-7", "issue-42", tmp_path / "Sample.pdf"
            )

        assert isinstance(exc_info.value.__cause__, DecryptionFailedError)
        assert exc_info.value.state == IssueState.PAGES_FETCHED.value
        assert "not-the-password" not in str(exc_info.value)
        assert list(tmp_path.iterdir()) == []

    def test_malformed_page_writes_nothing(
        self, orchestrator, page_server, session, tmp_path
    ):
        page_server.pages[PAGE_URL_TEMPLATE.format(index=2)] = b"<html>maintenance</html>"

        with pytest.raises(IssueDownloadError) as exc_info:
            orchestrator.download_issue(
                RunContext(), session, "mag-7", "issue-42", tmp_path / "Sample.pdf"
            )

        assert exc_info.value.page_index == 2
        assert list(tmp_path.iterdir()) == []

    def test_empty_issue_is_an_error(
        self, metadata_client, sample_issue, orchestrator, page_server, session, tmp_path
    ):
        metadata_client.get_issue.return_value = sample_issue.model_copy(
            update={"page_count": 0}
        )

        with pytest.raises(IssueDownloadError) as exc_info:
            orchestrator.download_issue(
                RunContext(), session, "mag-7", "issue-42", tmp_path / "Sample.pdf"
            )

        assert isinstance(exc_info.value.__cause__, EmptyIssueError)
        assert page_server.requests == []
        assert list(tmp_path.iterdir()) == []

    def test_metadata_failure_is_wrapped(
        self, metadata_client, orchestrator, session, tmp_path
    ):
        metadata_client.get_issue.side_effect = NotFoundError("no such issue")

        with pytest.raises(IssueDownloadError) as exc_info:
            orchestrator.download_issue(
                RunContext(), session, "mag-7", "issue-42", tmp_path / "Sample.pdf"
            )

        assert exc_info.value.state == IssueState.PENDING.value
        assert exc_info.value.page_index is None

    def test_non_json_metadata_is_wrapped(self, page_server, session, tmp_path):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, text="<html>maintenance</html>")
        )
        metadata_client = ZinioClient({"base_url": "https://www.zinio.com"})
        metadata_client._client = httpx.Client(
            base_url="https://www.zinio.com", transport=transport
        )
        orchestrator = IssueDownloadOrchestrator(
            metadata_client, fetcher=PageFetcher(http_client=page_server.client())
        )

        with metadata_client, pytest.raises(IssueDownloadError) as exc_info:
            orchestrator.download_issue(
                RunContext(), session, "mag-7", "issue-42", tmp_path / "Sample.pdf"
            )

        error = exc_info.value
        assert isinstance(error.__cause__, ValidationError)
        assert error.issue_id == "issue-42"
        assert error.magazine_id == "mag-7"
        assert error.state == IssueState.PENDING.value
        assert page_server.requests == []
        assert list(tmp_path.iterdir()) == []

    def test_persist_failure_is_wrapped(self, metadata_client, page_server, session, tmp_path):
        persister = MagicMock()
        persister.exists.return_value = False
        persister.persist.side_effect = PersistError("disk full", path=tmp_path / "x.pdf")
        orchestrator = IssueDownloadOrchestrator(
            metadata_client,
            fetcher=PageFetcher(http_client=page_server.client()),
            persister=persister,
        )

        with pytest.raises(IssueDownloadError) as exc_info:
            orchestrator.download_issue(
                RunContext(), session, "mag-7", "issue-42", tmp_path / "Sample.pdf"
            )

        assert exc_info.value.state == IssueState.MERGED.value


class TestCancellation:
    def test_cancelled_context_stops_before_first_page(
        self, orchestrator, page_server, session, tmp_path
    ):
        context = RunContext()
        context.cancel()

        with pytest.raises(IssueDownloadError) as exc_info:
            orchestrator.download_issue(
                context, session, "mag-7", "issue-42", tmp_path / "Sample.pdf"
            )

        assert exc_info.value.page_index == 0
        assert page_server.requests == []

    def test_cancel_between_pages_stops_further_fetches(
        self, metadata_client, sample_pages, session, tmp_path
    ):
        context = RunContext()
        fetcher = MagicMock()

        def fetch(ctx, url):
            context.cancel()
            return sample_pages[url]

        fetcher.fetch.side_effect = fetch
        orchestrator = IssueDownloadOrchestrator(metadata_client, fetcher=fetcher)

        with pytest.raises(IssueDownloadError) as exc_info:
            orchestrator.download_issue(
                context, session, "mag-7", "issue-42", tmp_path / "Sample.pdf"
            )

        assert fetcher.fetch.call_count == 1
        assert exc_info.value.page_index == 1
        assert list(tmp_path.iterdir()) == []
