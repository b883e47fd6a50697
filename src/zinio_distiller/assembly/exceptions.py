"""Exceptions raised while assembling an issue document."""

from pathlib import Path


class AssemblyError(Exception):
    """Base exception for all issue assembly errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class OperationCancelledError(AssemblyError):
    """Raised when the run context was cancelled or its deadline passed."""

    pass


class FetchError(AssemblyError):
    """Raised when a page container cannot be fetched."""

    def __init__(self, message: str, url: str, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class MalformedPageError(AssemblyError):
    """Raised when fetched content does not parse as a PDF container."""

    def __init__(self, message: str, page_index: int | None = None):
        self.page_index = page_index
        super().__init__(message)


class DecryptionFailedError(AssemblyError):
    """Raised when a page container rejects the issue password.

    The password itself is never stored on the exception.
    """

    def __init__(
        self,
        message: str,
        page_index: int | None = None,
        issue_id: str | None = None,
    ):
        self.page_index = page_index
        self.issue_id = issue_id
        super().__init__(message)


class MergeError(AssemblyError):
    """Raised when a decrypted sub-page cannot be appended to the output."""

    def __init__(self, message: str, page_index: int | None = None):
        self.page_index = page_index
        super().__init__(message)


class PersistError(AssemblyError):
    """Raised when the merged document cannot be written to its destination."""

    def __init__(self, message: str, path: Path):
        self.path = path
        super().__init__(message)


class EmptyIssueError(AssemblyError):
    """Raised for an issue that has no pages to assemble."""

    pass


class IssueDownloadError(AssemblyError):
    """Raised by the orchestrator when an issue cannot be downloaded.

    Wraps the first failure of the issue (available as __cause__) together
    with the identity of the issue and, where one page caused it, the page.
    """

    def __init__(
        self,
        message: str,
        magazine_id: str,
        issue_id: str,
        page_index: int | None = None,
        state: str | None = None,
    ):
        self.magazine_id = magazine_id
        self.issue_id = issue_id
        self.page_index = page_index
        self.state = state
        super().__init__(message)
