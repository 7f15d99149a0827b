"""Error types for media lookup and file serving."""


class MediaError(Exception):
    """Base class for errors rendered as a JSON error envelope."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class InvalidMediaPathError(MediaError):
    """The request path does not name a file."""

    status_code = 400


class PathTraversalError(MediaError):
    """A resolved path escapes the media root."""

    status_code = 403

    def __init__(self, attempted_path: str, message: str = "Access denied"):
        super().__init__(message)
        self.attempted_path = attempted_path


class MediaFileNotFoundError(MediaError):
    """The file (or catalog record) does not exist."""

    status_code = 404

    def __init__(self, message: str = "Media file not found", path: str | None = None):
        super().__init__(message)
        self.path = path


class RangeNotSatisfiableError(MediaError):
    """The requested byte range lies outside the file."""

    status_code = 416

    def __init__(self, total: int, message: str = "Requested range not satisfiable"):
        super().__init__(message)
        self.total = total

    @property
    def headers(self) -> dict[str, str]:
        return {"Content-Range": f"bytes */{self.total}"}
