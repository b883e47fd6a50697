"""Document merger for concatenating decrypted sub-pages."""

import logging
from collections.abc import Iterable
from pathlib import Path

import fitz  # PyMuPDF

from .decryptor import DecryptedPageSet
from .exceptions import MergeError

logger = logging.getLogger(__name__)


def strip_annotations(page: fitz.Page) -> fitz.Page:
    """Drop the interactive annotations attached to a page.

    Clears the page dictionary's /Annots entry, which removes viewer
    annotations, links and form widgets in one step.

    Args:
        page: Page to strip, modified in place

    Returns:
        The same page
    """
    page.parent.xref_set_key(page.xref, "Annots", "null")
    return page


class MergedDocument:
    """The output document being assembled for one issue.

    Attributes:
        document: PyMuPDF document receiving the sub-pages
    """

    def __init__(self, document: fitz.Document | None = None):
        self.document = document if document is not None else fitz.open()

    def __repr__(self) -> str:
        return f"MergedDocument(page_count={self.page_count})"

    @property
    def page_count(self) -> int:
        return self.document.page_count

    def save(self, path: Path) -> None:
        """Serialize the document to a file.

        PyMuPDF refuses to save a document without pages (ValueError) and
        reports write failures with its own exception types.
        """
        self.document.save(str(path), garbage=3, deflate=True)

    def close(self) -> None:
        self.document.close()

    def __enter__(self) -> "MergedDocument":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class DocumentMerger:
    """Concatenates decrypted sub-pages into one output document.

    Page sets are merged in the order given and each set's sub-pages in
    their internal order. Ordering decisions belong to the sequencer; the
    merger only appends.
    """

    def merge(self, page_sets: Iterable[DecryptedPageSet]) -> MergedDocument:
        """Merge page sets into a new document.

        Args:
            page_sets: Decrypted page sets in output order. May be a
                       generator that decrypts lazily.

        Returns:
            MergedDocument holding every sub-page

        Raises:
            MergeError: If a sub-page cannot be appended
        """
        merged = MergedDocument()
        try:
            for page_set in page_sets:
                self.append(merged, page_set)
        except Exception:
            merged.close()
            raise

        logger.debug(f"Merged {merged.page_count} sub-pages")
        return merged

    def append(self, merged: MergedDocument, page_set: DecryptedPageSet) -> None:
        """Append every sub-page of one page set, annotations stripped.

        Raises:
            MergeError: If a sub-page cannot be appended
        """
        for number, sub_page in enumerate(page_set, start=1):
            try:
                strip_annotations(sub_page)
                merged.document.insert_pdf(
                    page_set.document,
                    from_page=number - 1,
                    to_page=number - 1,
                    links=False,
                    annots=False,
                )
            except Exception as e:
                raise MergeError(
                    f"Cannot append sub-page {number} of page {page_set.page_index}: {e}",
                    page_index=page_set.page_index,
                ) from e
