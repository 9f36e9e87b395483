"""
Error taxonomy for the cover studio.

Every error carries the HTTP status and the envelope fields it should be
rendered with, so handlers only have to raise.
"""

from typing import Any, Dict, Optional


class CoverStudioError(Exception):
    """Base exception for all request-terminating failures."""

    def __init__(
        self,
        message: str,
        error_type: str = "unknown",
        http_status: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            message: Short human-readable error (rendered as ``error``)
            error_type: Machine-readable classification (rendered as ``code``)
            http_status: 4xx for client input errors, 5xx for service errors
            details: Extra envelope fields (raw model text, offending type, ...)
        """
        self.message = message
        self.error_type = error_type
        self.http_status = http_status
        self.details = details or {}
        super().__init__(message)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.error_type,
        }
        payload.update(self.details)
        return payload


# Client input errors (4xx)


class UploadTooLargeError(CoverStudioError):
    def __init__(self, limit_bytes: int):
        super().__init__(
            "File too large",
            error_type="file_too_large",
            http_status=413,
            details={"maxBytes": limit_bytes},
        )


class MissingUploadError(CoverStudioError):
    def __init__(self, field_name: str = "audio"):
        super().__init__(
            "File not received",
            error_type="file_missing",
            http_status=400,
            details={"field": field_name},
        )


class UnsupportedMediaTypeError(CoverStudioError):
    def __init__(self, mime_type: str):
        super().__init__(
            "Unsupported file type",
            error_type="unsupported_type",
            http_status=400,
            details={"mimeType": mime_type},
        )


class MissingAnalysisError(CoverStudioError):
    def __init__(self):
        super().__init__(
            "Missing analysis data", error_type="missing_analysis", http_status=400
        )


class InvalidRequestError(CoverStudioError):
    def __init__(self, reason: str):
        super().__init__(
            "Invalid request",
            error_type="invalid_request",
            http_status=400,
            details={"details": reason},
        )


# External service errors (5xx)


class InvalidModelResponseError(CoverStudioError):
    """The analysis service answered with text that is not a JSON object."""

    def __init__(self, raw: str, reason: str = ""):
        self.raw = raw
        details: Dict[str, Any] = {"raw": raw}
        if reason:
            details["details"] = reason
        super().__init__(
            "Invalid JSON response",
            error_type="invalid_json",
            http_status=500,
            details=details,
        )


class ResponseHandlingError(CoverStudioError):
    """Reading the answer out of the client response failed."""

    def __init__(self, reason: str):
        super().__init__(
            "Model response handling failed",
            error_type="response_handling_failed",
            http_status=500,
            details={"details": reason},
        )


class AnalysisServiceError(CoverStudioError):
    def __init__(self, reason: str):
        super().__init__(
            "Server error",
            error_type="analysis_failed",
            http_status=500,
            details={"details": reason},
        )


class ServiceTimeoutError(CoverStudioError):
    def __init__(self, operation: str):
        super().__init__(
            "Request to AI service timed out",
            error_type="timeout",
            http_status=504,
            details={"operation": operation},
        )


class CoverGenerationError(CoverStudioError):
    def __init__(self, reason: str):
        super().__init__(
            "Image generation failed",
            error_type="generation_failed",
            http_status=500,
            details={"details": reason},
        )


class NoCoversGeneratedError(CoverStudioError):
    def __init__(self, attempted: int):
        super().__init__(
            "No images generated",
            error_type="no_images",
            http_status=500,
            details={"covers": [], "attempted": attempted},
        )
