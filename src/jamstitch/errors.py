"""Fatal errors raised during a stitch run."""


class StitchError(Exception):
    """Base class for errors that abort a stitch run."""


class RetrievalError(StitchError):
    """A project or its manifest could not be fetched or parsed."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url


class PublicationError(StitchError):
    """The bundle could not be published."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnbalancedScanError(StitchError):
    """A brace scan ran off the end of the text or exceeded its step bound."""

    def __init__(self, name: str, offset: int, reason: str) -> None:
        super().__init__(f"Unbalanced braces in '{name}' at offset {offset}: {reason}")
        self.name = name
        self.offset = offset
