"""Issue metadata schema."""

from pydantic import BaseModel, Field, SecretStr


class PageIndexError(IndexError):
    """Raised when a page index falls outside an issue's page range."""

    def __init__(self, index: int, page_count: int):
        self.index = index
        self.page_count = page_count
        super().__init__(
            f"page index {index} out of range for issue with {page_count} pages"
        )


class Issue(BaseModel):
    """A downloadable magazine issue as described by the content service.

    Issues are read-only for the download pipeline. The password unlocks
    every page container of the issue and is kept as a SecretStr so it never
    shows up in reprs or log lines.

    Attributes:
        id: Issue identifier
        magazine_id: Identifier of the magazine the issue belongs to
        title: Display title
        password: Decrypted password shared by all page containers
        page_count: Number of page containers in the issue
        page_url_template: Page URL with an ``{index}`` placeholder
    """

    id: str
    magazine_id: str
    title: str
    password: SecretStr
    page_count: int = Field(ge=0)
    page_url_template: str

    model_config = {"frozen": True}

    def page_url(self, index: int) -> str:
        """Return the URL of the page container at a zero-based index.

        Raises:
            PageIndexError: If index is negative or not below page_count
        """
        if index < 0 or index >= self.page_count:
            raise PageIndexError(index, self.page_count)
        return self.page_url_template.format(index=index)

    def page_urls(self) -> list[str]:
        return [self.page_url(i) for i in range(self.page_count)]
