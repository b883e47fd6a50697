"""Library listing schemas."""

from pydantic import BaseModel, Field


class IssueSummary(BaseModel):
    """An issue entry in the user's library.

    Attributes:
        id: Issue identifier
        title: Issue display title, used for the output filename
    """

    id: str
    title: str


class Magazine(BaseModel):
    """A magazine in the user's library together with its owned issues.

    Attributes:
        id: Magazine identifier
        title: Magazine display title, used for the output directory
        issues: Issues of this magazine available to the user
    """

    id: str
    title: str
    issues: list[IssueSummary] = Field(default_factory=list)


class Library(BaseModel):
    """The library listing returned for a user.

    Attributes:
        magazines: Magazines the user owns issues of
    """

    magazines: list[Magazine] = Field(default_factory=list)
