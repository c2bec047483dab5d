"""Exception classes for DocVault."""

from pathlib import Path


class DocVaultError(Exception):
    """Base exception for DocVault."""


class NotFoundError(DocVaultError):
    """Unknown document, model, user or chunk parent id."""


class UnsupportedFileTypeError(DocVaultError):
    """No processor is registered for an extension."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"unsupported file type: {extension or '<none>'}")


class ExtractionFailedError(DocVaultError):
    """A processor could not read or parse the underlying bytes."""

    def __init__(self, path: str | Path, cause: BaseException | str):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"failed to process {Path(path).name}: {cause}")


class ValidationFailedError(DocVaultError):
    """A precondition was violated."""


class StoreClosedError(DocVaultError):
    """The document store was used after close()."""

    def __init__(self):
        super().__init__("store closed")
