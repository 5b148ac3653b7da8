"""Exception hierarchy for signpdf."""


class SignPdfError(Exception):
    """Base exception for all signpdf errors."""


class StampError(SignPdfError):
    """Base exception for errors that abort a stamp operation."""


class ParseError(StampError):
    """Raised when the source document cannot be parsed as a PDF."""


class ImageDecodeError(StampError):
    """Raised when the signature image cannot be decoded as a PNG."""


class ResourceLoadError(SignPdfError):
    """Raised when a collaborator cannot be initialized."""


class PersistenceError(SignPdfError):
    """Raised when saving the stamped document to the store fails."""


class DocumentStoreAPIError(PersistenceError):
    """Raised when the document store returns an error response."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        if detail:
            msg = f"API error {status_code}: {detail}"
        else:
            msg = f"API error {status_code}"
        super().__init__(msg)


class DocumentStoreConnectionError(PersistenceError):
    """Raised when unable to connect to the document store."""


class DocumentStoreAuthError(PersistenceError):
    """Raised when authentication with the document store fails."""
