class LivePhotoError(Exception):
    """Base error carrying the HTTP status the API answers with."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(LivePhotoError):
    status_code = 400


class AuthRequired(LivePhotoError):
    status_code = 401

    def to_dict(self) -> dict:
        return {"error": self.message, "needsPassword": True}


class Forbidden(LivePhotoError):
    status_code = 403


class NotFound(LivePhotoError):
    status_code = 404


class FileTooLarge(LivePhotoError):
    status_code = 413


class UnsupportedMediaType(LivePhotoError):
    status_code = 415


class InternalError(LivePhotoError):
    status_code = 500


class ConversionFailure(Exception):
    """Photo format conversion failed; the caller keeps the original file."""
