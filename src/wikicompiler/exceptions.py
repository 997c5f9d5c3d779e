"""Custom exceptions for wikicompiler."""


class WikiCompilerError(Exception):
    """Base exception for wikicompiler operations."""


class FetchError(WikiCompilerError):
    """Error during content fetching."""


class ArticleNotFoundError(FetchError):
    """Wikipedia has no page for the requested title."""


class RateLimitError(FetchError):
    """Rate limited by Wikipedia."""


class ArticleFetchError(FetchError):
    """One article's content could not be retrieved; the export is aborted."""

    def __init__(self, title: str, message: str | None = None) -> None:
        self.title = title
        super().__init__(message or f"Failed to fetch article: {title}")


class BibliographyGenerationError(WikiCompilerError):
    """Article metadata could not be fetched for the bibliography."""


class RenderError(WikiCompilerError):
    """Error while rendering or packaging an export format."""

    def __init__(self, export_format: str, message: str | None = None) -> None:
        self.export_format = export_format
        super().__init__(message or f"Failed to render {export_format} export")


class ParseWarning(UserWarning):
    """Recoverable problem met while converting HTML into document blocks."""
