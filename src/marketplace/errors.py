"""Business errors raised by the marketplace domain.

Field-level validation and illegal state transitions use protean's
``ValidationError``. The classes here cover the outcomes a caller must be
able to tell apart: missing records, authorization failures and conflicts.
Each carries the HTTP status the API answers with.
"""


class MarketplaceError(Exception):
    status_code = 400

    def __init__(self, message, **context):
        super().__init__(message)
        self.message = message
        self.context = context


# Not found
class NotFound(MarketplaceError):
    status_code = 404


class ProductNotFound(NotFound):
    pass


class OrderNotFound(NotFound):
    pass


class VariantNotFound(NotFound):
    pass


class TenantNotFound(NotFound):
    pass


class CouponNotFound(NotFound):
    pass


# Authorization
class NotAuthorized(MarketplaceError):
    status_code = 403


# Checkout
class NoItems(MarketplaceError):
    pass


class InsufficientStock(MarketplaceError):
    pass


# Routing
class TenantNotApproved(MarketplaceError):
    pass


class AlreadyAssigned(MarketplaceError):
    pass


class AlreadyClaimed(MarketplaceError):
    pass


# Coupons
class CouponNotYetValid(MarketplaceError):
    pass


class CouponExpired(MarketplaceError):
    pass


class BelowMinimumOrder(MarketplaceError):
    pass


class UsageLimitReached(MarketplaceError):
    pass


class AlreadyUsedByUser(MarketplaceError):
    pass


# Persistence
class ConcurrentUpdate(MarketplaceError):
    """Raised when a record changed between being read and being written."""

    status_code = 409


class OrderNumberUnavailable(MarketplaceError):
    status_code = 503
