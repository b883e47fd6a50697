"""Atomic persistence of merged issue documents."""

import logging
from pathlib import Path

from .exceptions import PersistError
from .merger import MergedDocument

logger = logging.getLogger(__name__)

PART_SUFFIX = ".part"


class AtomicPersister:
    """Writes a merged document so its destination is never half-written.

    The document is saved to a sibling temp file (destination name plus
    the part suffix) and renamed onto the destination only after the save
    succeeded. An existing destination is never overwritten. The
    exists-then-rename sequence assumes a single writer per destination.

    Attributes:
        suffix: Suffix appended to the destination name for the temp file
    """

    def __init__(self, suffix: str = PART_SUFFIX):
        self.suffix = suffix

    def temp_path(self, destination: Path) -> Path:
        return destination.with_name(destination.name + self.suffix)

    def exists(self, destination: Path) -> bool:
        return destination.exists()

    def persist(self, document: MergedDocument, destination: Path) -> bool:
        """Write the document to its destination.

        Args:
            document: Merged issue document
            destination: Final path of the output file

        Returns:
            True if the file was written, False if the destination already
            existed and nothing was written

        Raises:
            PersistError: If saving or renaming fails; the temp file is
                          removed and the destination left untouched
        """
        if self.exists(destination):
            logger.info(f"{destination} already exists, skipping")
            return False

        temp = self.temp_path(destination)
        try:
            document.save(temp)
            temp.replace(destination)
        except Exception as e:
            temp.unlink(missing_ok=True)
            raise PersistError(f"Failed to save {destination}: {e}", path=destination) from e

        logger.debug(f"Saved {document.page_count} pages to {destination}")
        return True
