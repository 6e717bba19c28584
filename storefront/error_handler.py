"""Error handling helpers for the storefront API."""
from typing import Any, Dict
import logging

from storefront.clients.api_client import get_error_message

logger = logging.getLogger(__name__)


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        logger.error("Unhandled exception in storefront API: %s", exc, exc_info=True)
        return {
            "error": "An internal error occurred while processing your request. Please try again later.",
            "context": context or {},
        }

    def user_message(self, exc: BaseException) -> str:
        """Message safe to show a shopper for a client-side failure."""
        return get_error_message(exc)
