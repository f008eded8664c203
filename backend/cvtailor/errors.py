"""
Error taxonomy for CV generation.

Every failure a request can hit is one of these kinds. Each carries the HTTP
status it maps to so the API layer can translate it without re-classifying.
"""
from typing import Optional


class CvTailorError(Exception):
    status_code = 500

    def __init__(self, detail: str, status_code: Optional[int] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code

    @property
    def kind(self) -> str:
        return type(self).__name__


class InvalidInput(CvTailorError):
    status_code = 422


class TemplateUnavailable(CvTailorError):
    status_code = 500


class CompletionFailed(CvTailorError):
    status_code = 502


class NoJsonFound(CvTailorError):
    status_code = 422

    def __init__(self, raw: str) -> None:
        super().__init__("No JSON object or array found in completion")
        self.raw = raw


class MalformedJson(CvTailorError):
    status_code = 422

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(f"Failed to parse CV data: {message}")
        self.message = message
        self.raw = raw


class UnexpectedShape(CvTailorError):
    status_code = 422


class PersistenceFailure(CvTailorError):
    status_code = 500


class RenderFailure(CvTailorError):
    status_code = 500


class NotFound(CvTailorError):
    status_code = 404
