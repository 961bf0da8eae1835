"""Error taxonomy and user-facing error helpers for the dashboard bot."""
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class DashbotError(Exception):
    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class AuthError(DashbotError):
    """BI sign-in failed. Fatal at startup."""


class CatalogLoadError(DashbotError):
    """Initial catalog build failed. Fatal at startup."""


class RenderFetchError(DashbotError):
    """Fetching a rendered view failed. Reported to the requesting user only."""

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code


class DeliveryError(DashbotError):
    """Uploading the rendered image to the chat failed."""


class AuthorizationError(DashbotError):
    """Inbound chat request carried a verification token that does not match."""


class BIServerResponseError(ValueError):
    def __init__(self, message: str, *, payload: Optional[str] = None) -> None:
        super().__init__(message)
        self.payload = payload or ""


class ErrorHandler:
    def user_notice(self, exc: Exception) -> str:
        if isinstance(exc, RenderFetchError):
            return "Sorry, I couldn't fetch that dashboard from the BI server. Please try again later."
        if isinstance(exc, DeliveryError):
            return "Sorry, I fetched the dashboard but couldn't upload it to this channel."
        return "Sorry, something went wrong while getting your dashboard."

    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        logger.error("Fulfillment failed: %s (cause: %s)", exc, getattr(exc, "cause", None), exc_info=exc)
        return {
            "message": self.user_notice(exc),
            "metadata": {"error": str(exc), "context": context or {}},
        }
