"""Page decryptor for password-protected page containers."""

import logging
from collections.abc import Iterator

import fitz  # PyMuPDF

from schemas.page import Page

from .exceptions import DecryptionFailedError, MalformedPageError

logger = logging.getLogger(__name__)


class DecryptedPageSet:
    """The unlocked sub-pages of one page container.

    Wraps the authenticated PyMuPDF document. Sub-pages are addressed
    1-based and iterate in the container's internal order. Close the set
    (or use it as a context manager) once its pages have been merged.

    Attributes:
        document: Authenticated PyMuPDF document
        page_index: Zero-based position of the source page in the issue
    """

    def __init__(self, document: fitz.Document, page_index: int):
        self.document = document
        self.page_index = page_index

    def __repr__(self) -> str:
        return f"DecryptedPageSet(page_index={self.page_index}, page_count={self.page_count})"

    @property
    def page_count(self) -> int:
        return self.document.page_count

    def sub_page(self, number: int) -> fitz.Page:
        """Return the sub-page with the given 1-based number.

        Raises:
            IndexError: If number is outside 1..page_count
        """
        if number < 1 or number > self.page_count:
            raise IndexError(
                f"sub-page {number} out of range 1..{self.page_count} "
                f"for page {self.page_index}"
            )
        return self.document[number - 1]

    def __iter__(self) -> Iterator[fitz.Page]:
        for number in range(1, self.page_count + 1):
            yield self.sub_page(number)

    def close(self) -> None:
        self.document.close()

    def __enter__(self) -> "DecryptedPageSet":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class PageDecryptor:
    """Opens a page container and unlocks it with the issue password.

    Containers that are not encrypted are accepted as they are.
    """

    def decrypt(
        self,
        page: Page,
        password: bytes | str,
        issue_id: str | None = None,
    ) -> DecryptedPageSet:
        """Decrypt one page container.

        Args:
            page: Fetched page container
            password: Issue password
            issue_id: Issue identifier, used in error reports

        Returns:
            DecryptedPageSet exposing the container's sub-pages

        Raises:
            MalformedPageError: If the content is not a readable PDF
            DecryptionFailedError: If the container rejects the password
        """
        label = self._label(page, issue_id)

        try:
            document = fitz.open(stream=page.content, filetype="pdf")
        except Exception as e:
            raise MalformedPageError(
                f"Cannot parse {label}: {e}", page_index=page.index
            ) from e

        if document.needs_pass:
            # Never include the password in the messages below.
            if isinstance(password, bytes):
                try:
                    password = password.decode("utf-8")
                except UnicodeDecodeError:
                    document.close()
                    raise DecryptionFailedError(
                        f"Password for {label} is not valid UTF-8",
                        page_index=page.index,
                        issue_id=issue_id,
                    ) from None
            if not document.authenticate(password):
                document.close()
                raise DecryptionFailedError(
                    f"Password rejected for {label}",
                    page_index=page.index,
                    issue_id=issue_id,
                )
        else:
            logger.debug(f"{label} is not encrypted")

        if document.page_count == 0:
            document.close()
            raise MalformedPageError(f"{label} has no pages", page_index=page.index)

        return DecryptedPageSet(document, page.index)

    def _label(self, page: Page, issue_id: str | None) -> str:
        if issue_id is None:
            return f"page {page.index}"
        return f"page {page.index} of issue {issue_id}"
