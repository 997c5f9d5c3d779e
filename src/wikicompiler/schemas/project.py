"""Compilation project model."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProjectArticle(BaseModel):
    """An article reference inside a project."""

    title: str


class Project(BaseModel):
    """A compilation project: ordered article titles plus free-form notes.

    Attributes:
        id: Project identifier assigned by the project store.
        name: Display name, also used to build export filenames.
        articles: Articles in the order they appear in the compiled document.
        notes: Optional project notes, rendered as the first section.
    """

    id: str
    name: str
    articles: list[ProjectArticle] = Field(default_factory=list)
    notes: str | None = None

    @property
    def titles(self) -> list[str]:
        return [article.title for article in self.articles]
