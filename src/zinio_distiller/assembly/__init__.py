"""Issue assembly stages: fetch, sequence, decrypt, merge and persist."""

from .exceptions import (
    AssemblyError,
    DecryptionFailedError,
    EmptyIssueError,
    FetchError,
    IssueDownloadError,
    MalformedPageError,
    MergeError,
    OperationCancelledError,
    PersistError,
)
from .context import RunContext
from .decryptor import DecryptedPageSet, PageDecryptor
from .fetcher import PageFetcher
from .merger import DocumentMerger, MergedDocument, strip_annotations
from .persister import AtomicPersister
from .sequencer import PageSequencer

__all__ = [
    "AssemblyError",
    "AtomicPersister",
    "DecryptedPageSet",
    "DecryptionFailedError",
    "DocumentMerger",
    "EmptyIssueError",
    "FetchError",
    "IssueDownloadError",
    "MalformedPageError",
    "MergeError",
    "MergedDocument",
    "OperationCancelledError",
    "PageDecryptor",
    "PageFetcher",
    "PageSequencer",
    "PersistError",
    "RunContext",
    "strip_annotations",
]
