"""Citation models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ArticleMetadata(BaseModel):
    """Revision metadata for a Wikipedia article.

    Attributes:
        pageid: Wikipedia page identifier.
        revid: Revision the bibliography permalink points at.
        touched: Last-touched timestamp; cited as the retrieval date.
        title: Canonical article title.
    """

    model_config = ConfigDict(frozen=True)

    pageid: int
    revid: int
    touched: datetime
    title: str


class CustomCitation(BaseModel):
    """A user-entered source cited alongside the project's articles."""

    id: str
    key: str
    author: str = ""
    year: str = ""
    title: str = ""
    url: str = ""
