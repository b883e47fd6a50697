"""Page ordering policy."""

from schemas.page import Page


class PageSequencer:
    """Puts fetched pages into output order.

    Output order follows the content service's page layout, in which the
    first fetched container goes last: [0, 1, ..., N-1] becomes
    [1, ..., N-1, 0]. Subclass and override sequence() to change the
    policy without touching fetch or merge.
    """

    def sequence(self, pages: list[Page]) -> list[Page]:
        if not pages:
            return []
        return pages[1:] + pages[:1]
