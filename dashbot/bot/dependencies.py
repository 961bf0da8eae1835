import hmac
import logging

from dashbot.error_handler import AuthorizationError

logger = logging.getLogger(__name__)


def verify_token(candidate: str, expected: str) -> None:
    """Raise AuthorizationError unless `candidate` equals the configured verification token."""
    candidate = (candidate or "").strip()
    ok = bool(candidate) and bool(expected) and hmac.compare_digest(candidate, expected)
    if not ok:
        logger.warning("Rejected Slack request: verification token mismatch (present=%s)", bool(candidate))
        raise AuthorizationError("Invalid verification token")
