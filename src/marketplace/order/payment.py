"""Payment verification and failure recording: commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order, OrderStatus
from marketplace.order.queries import load_order
from marketplace.order.status import apply_status_change
from marketplace.payment import get_verifier
from marketplace.utils.concurrency import retry_on_conflict, save_if_unchanged

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class VerifyPayment:
    order_id = Identifier(required=True)
    razorpay_order_id = String(required=True, max_length=100)
    razorpay_payment_id = String(required=True, max_length=100)
    razorpay_signature = String(required=True, max_length=256)


@marketplace.command(part_of="Order")
class RecordPaymentFailure:
    order_id = Identifier(required=True)
    razorpay_order_id = String(max_length=100)
    description = String(max_length=500)


@marketplace.command_handler(part_of=Order)
class PaymentHandler:
    @retry_on_conflict()
    @handle(VerifyPayment)
    def verify_payment(self, command):
        """Returns whether the signature was authentic. A bad signature is recorded, not raised."""
        order = load_order(command.order_id)
        verified = get_verifier().verify(
            command.razorpay_order_id,
            command.razorpay_payment_id,
            command.razorpay_signature,
        )

        if verified:
            order.record_payment(
                command.razorpay_order_id,
                command.razorpay_payment_id,
                command.razorpay_signature,
            )
            logger.info("payment_verified", order_id=str(order.id), payment_id=command.razorpay_payment_id)
        else:
            order.record_payment_failure(command.razorpay_order_id)
            logger.warning("payment_signature_invalid", order_id=str(order.id))

        save_if_unchanged(current_domain.repository_for(Order), order)
        return verified

    @retry_on_conflict()
    @handle(RecordPaymentFailure)
    def record_payment_failure(self, command):
        order = load_order(command.order_id)
        order.record_payment_failure(command.razorpay_order_id)
        if not order.is_terminal:
            reason = f"Payment failed: {command.description or 'Unknown error'}"
            apply_status_change(order, OrderStatus.CANCELLED.value, reason)

        save_if_unchanged(current_domain.repository_for(Order), order)
        logger.info("payment_failed", order_id=str(order.id), description=command.description)
