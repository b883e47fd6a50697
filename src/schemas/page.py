"""Page domain object."""

from dataclasses import dataclass, field


@dataclass
class Page:
    """One fetched page container, still encrypted.

    Attributes:
        index: Zero-based position of the page in the issue
        content: Raw bytes of the encrypted container
    """

    index: int
    content: bytes = field(repr=False)
