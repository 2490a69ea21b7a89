"""Fire-and-forget notification delivery.

A failing dispatcher never fails the business operation that triggered the
notification: the error is logged and swallowed.
"""

import structlog

from marketplace.notification import get_dispatcher

logger = structlog.get_logger(__name__)


def notify(recipient_id, title, message, link=None):
    if not recipient_id:
        logger.warning("notification_skipped_no_recipient", title=title)
        return None

    try:
        result = get_dispatcher().send(str(recipient_id), title, message, link)
    except Exception:
        logger.exception("notification_failed", recipient_id=str(recipient_id), title=title)
        return None

    logger.info("notification_sent", recipient_id=str(recipient_id), title=title)
    return result


def order_ref(order_id) -> str:
    """Short reference shown to people: the last six characters of the id, upper-cased."""
    return str(order_id)[-6:].upper()


def format_rupees(amount) -> str:
    if float(amount).is_integer():
        return f"₹{int(amount)}"
    return f"₹{amount:.2f}"
