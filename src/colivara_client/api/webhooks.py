"""Verification of incoming ColiVara webhook calls.

ColiVara delivers webhooks through Svix. Signature checking is delegated
entirely to the ``svix`` library; this module only turns its outcome into a
boolean.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from svix.webhooks import Webhook


if TYPE_CHECKING:
    from collections.abc import Mapping


__all__ = ["validate_webhook"]

logger = structlog.get_logger(__name__)


def validate_webhook(
    webhook_secret: str,
    payload: str | bytes,
    headers: Mapping[str, str],
) -> bool:
    """Check that a webhook call was signed with ``webhook_secret``.

    Args:
        webhook_secret: The secret returned when the webhook was registered.
        payload: The raw request body, exactly as received.
        headers: The request headers (``svix-id``, ``svix-timestamp`` and
            ``svix-signature`` are required for a successful check).

    Returns:
        True if the signature verifies, False for any failure, including
        missing headers, a malformed secret or an unexpected library error.
        This function never raises.
    """
    try:
        Webhook(webhook_secret).verify(payload, dict(headers))
    except Exception as exc:  # noqa: BLE001
        logger.debug(
            "webhook_verification_failed",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return False
    return True
