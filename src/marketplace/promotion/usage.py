"""Coupon usage bookkeeping.

Only dedicated coupons track usage; treasure and offer codes are unlimited.
The usage write is version-guarded, so two checkouts racing for the last
use of a coupon cannot both record it.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.promotion.coupon import Coupon
from marketplace.promotion.validation import evaluate_coupon, normalize_code
from marketplace.utils.concurrency import retry_on_conflict, save_if_unchanged

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Coupon")
class MarkCouponUsed:
    code = String(required=True, max_length=50)
    user_id = Identifier(required=True)


def redeem(code, user_id, cart_total):
    """Validate ``code`` for this checkout and record the use in the current unit of work."""
    quote, coupon = evaluate_coupon(code, cart_total, user_id)
    if coupon is not None:
        coupon.record_usage(user_id)
        save_if_unchanged(current_domain.repository_for(Coupon), coupon)
        logger.info("coupon_redeemed", code=coupon.code, user_id=str(user_id), used_count=coupon.used_count)
    return quote


def mark_used(code, user_id):
    """Record a use of a dedicated coupon. Codes without a coupon record are ignored."""
    code = normalize_code(code)
    repo = current_domain.repository_for(Coupon)
    coupons = repo._dao.query.filter(code=code).all().items
    if not coupons:
        return None

    coupon = coupons[0]
    coupon.record_usage(user_id)
    save_if_unchanged(repo, coupon)
    logger.info("coupon_marked_used", code=code, user_id=str(user_id), used_count=coupon.used_count)
    return coupon.used_count


@marketplace.command_handler(part_of=Coupon)
class CouponUsageHandler:
    @retry_on_conflict()
    @handle(MarkCouponUsed)
    def mark_coupon_used(self, command):
        return mark_used(command.code, command.user_id)
