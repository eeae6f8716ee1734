class FolioError(Exception):
    """Base class for content engine errors."""


class LoadError(FolioError):
    """Raised when the content root cannot be read."""


class ParseError(FolioError):
    """Raised when a single content file has malformed or incomplete front-matter."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class RenderError(FolioError):
    """Raised when a markdown body cannot be compiled."""
