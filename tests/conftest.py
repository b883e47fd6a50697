"""Pytest fixtures for zinio-distiller tests."""

from pathlib import Path

import fitz  # PyMuPDF
import httpx
import pytest

from schemas.issue import Issue
from schemas.magazine import IssueSummary, Magazine
from schemas.session import Session

PAGE_URL_TEMPLATE = "https://cdn.example.com/issues/42/page-{index}.pdf"


def build_pdf(*texts: str, password: str | None = None, annotate: bool = False) -> bytes:
    """Build a PDF with one page per text, optionally encrypted and annotated."""
    doc = fitz.open()
    for text in texts:
        page = doc.new_page()
        page.insert_text((72, 72), text)
        if annotate:
            page.add_text_annot((100, 100), "viewer note")

    if password is None:
        data = doc.tobytes()
    else:
        data = doc.tobytes(
            encryption=fitz.PDF_ENCRYPT_AES_256,
            user_pw=password,
            owner_pw=f"{password}-owner",
        )
    doc.close()
    return data


def read_pdf_texts(path: Path) -> list[str]:
    """Return the stripped text of every page of a PDF file."""
    with fitz.open(str(path)) as doc:
        return [page.get_text().strip() for page in doc]


def read_pdf_annotation_counts(path: Path) -> list[int]:
    with fitz.open(str(path)) as doc:
        return [len(list(page.annots())) for page in doc]


class PageServer:
    """In-memory page host behind an httpx.MockTransport."""

    def __init__(self, pages: dict[str, bytes] | None = None):
        self.pages = pages or {}
        self.requests: list[str] = []
        self.failures: dict[str, int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url in self.failures:
            return httpx.Response(self.failures[url])
        if url not in self.pages:
            return httpx.Response(404)
        return httpx.Response(200, content=self.pages[url])

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def make_pdf():
    """Factory for in-memory PDF page containers."""
    return build_pdf


@pytest.fixture
def session():
    """Authenticated session handle."""
    return Session(user_id="user-1", access_token="token-abc")


@pytest.fixture
def sample_issue():
    """Issue 'Sample' with three pages protected by password 'secret'."""
    return Issue(
        id="issue-42",
        magazine_id="mag-7",
        title="Sample",
        password="secret",
        page_count=3,
        page_url_template=PAGE_URL_TEMPLATE,
    )


@pytest.fixture
def sample_pages():
    """Encrypted single-page containers P0, P1, P2 keyed by their URLs."""
    return {
        PAGE_URL_TEMPLATE.format(index=i): build_pdf(f"Page {i}", password="secret")
        for i in range(3)
    }


@pytest.fixture
def page_server(sample_pages):
    return PageServer(dict(sample_pages))


@pytest.fixture
def sample_magazine():
    """Library entry with two issues."""
    return Magazine(
        id="mag-7",
        title="Sample Weekly",
        issues=[
            IssueSummary(id="issue-42", title="Sample"),
            IssueSummary(id="issue-43", title="Sample: Part/2"),
        ],
    )
