"""
Order Management Services for the TrackReview platform
Order creation, the guarded status state machine and access-checked queries.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.common.types import (
    AuthorizationError,
    BusinessError,
    ConflictError,
    Err,
    NotFoundError,
    Ok,
    Result,
)

from .models import Order, OrderStatusHistory

if TYPE_CHECKING:
    from apps.packages.models import ReviewerPackage
    from apps.users.models import User

logger = logging.getLogger(__name__)

# ===============================================================================
# STATE MACHINE
# ===============================================================================

# target status -> the only status it may be entered from
PREDECESSOR: dict[str, str] = {
    Order.STATUS_PAID: Order.STATUS_PENDING,
    Order.STATUS_COMPLETED: Order.STATUS_PAID,
}

TIMESTAMP_FIELD: dict[str, str] = {
    Order.STATUS_PAID: "paid_at",
    Order.STATUS_COMPLETED: "completed_at",
}


class OrderNotFound(NotFoundError):
    code = "order_not_found"


class InvalidTransition(ConflictError):
    code = "invalid_transition"


# ===============================================================================
# ORDER SERVICE PARAMETER OBJECTS
# ===============================================================================


@dataclass
class OrderCreateData:
    """Parameter object for order creation"""

    reviewer: User
    package: ReviewerPackage
    track_url: str
    track_title: str
    original_price: Decimal
    artist: User | None = None
    guest_email: str = ""
    note: str = ""
    currency: str = "usd"
    required_review_types: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TransitionResult:
    """
    Outcome of a guarded transition.

    `applied` is False when the order had already reached the target status;
    callers treat that as success with no change.
    """

    order: Order
    applied: bool
    previous_status: str


def parse_order_id(order_id: Any) -> uuid.UUID | None:
    if isinstance(order_id, uuid.UUID):
        return order_id
    try:
        return uuid.UUID(str(order_id))
    except (ValueError, TypeError, AttributeError):
        return None


# ===============================================================================
# ORDER SERVICE
# ===============================================================================


class OrderService:
    """Order creation and the only code path allowed to change Order.status"""

    @staticmethod
    def create_pending_order(data: OrderCreateData) -> Order:
        """Create an order in pending; price starts at the package price"""
        order = Order.objects.create(
            artist=data.artist,
            guest_email=data.guest_email,
            reviewer=data.reviewer,
            package=data.package,
            track_url=data.track_url,
            track_title=data.track_title,
            note=data.note,
            original_price=data.original_price,
            price_total=data.original_price,
            currency=data.currency,
            required_review_types=list(data.required_review_types),
        )
        OrderStatusHistory.objects.create(
            order=order,
            old_status="",
            new_status=Order.STATUS_PENDING,
            source=OrderStatusHistory.SOURCE_CHECKOUT,
            changed_by=data.artist,
        )
        logger.info(
            f"🛒 [Orders] Created order {order.id} for package {data.package.pk}",
            extra={"order_id": str(order.id), "reviewer_id": data.reviewer.pk},
        )
        return order

    @staticmethod
    def transition(  # noqa: PLR0913
        order_id: Any,
        to_status: str,
        source: str,
        changed_by: User | None = None,
        reason: str = "",
        extra_fields: dict[str, Any] | None = None,
    ) -> Result[TransitionResult, BusinessError]:
        """
        Move an order to `to_status` with a compare-and-swap on the status column.

        The UPDATE only matches while the order sits in the expected predecessor
        status, so concurrent callers cannot both apply the same transition.
        Reaching a status the order already has (or has passed) is a no-op.
        """
        predecessor = PREDECESSOR.get(to_status)
        if predecessor is None:
            return Err(InvalidTransition(f"Orders cannot be moved to {to_status}"))

        pk = parse_order_id(order_id)
        if pk is None:
            return Err(OrderNotFound(f"Order {order_id} not found"))

        now = timezone.now()
        updates: dict[str, Any] = {"status": to_status, "updated_at": now, TIMESTAMP_FIELD[to_status]: now}
        updates.update(extra_fields or {})

        with transaction.atomic():
            swapped = Order.objects.filter(pk=pk, status=predecessor).update(**updates)
            if swapped == 1:
                OrderStatusHistory.objects.create(
                    order_id=pk,
                    old_status=predecessor,
                    new_status=to_status,
                    source=source,
                    changed_by=changed_by,
                    reason=reason,
                )

        order = Order.objects.filter(pk=pk).first()
        if order is None:
            return Err(OrderNotFound(f"Order {order_id} not found"))

        if swapped == 1:
            logger.info(
                f"✅ [Orders] Order {pk}: {predecessor} → {to_status} via {source}",
                extra={"order_id": str(pk), "new_status": to_status, "source": source},
            )
            return Ok(TransitionResult(order=order, applied=True, previous_status=predecessor))

        if order.has_reached(to_status):
            logger.info(
                f"🔁 [Orders] Order {pk} already {order.status}; {source} transition to {to_status} is a no-op",
                extra={"order_id": str(pk), "status": order.status, "source": source},
            )
            return Ok(TransitionResult(order=order, applied=False, previous_status=order.status))

        logger.warning(
            f"⚠️ [Orders] Rejected {source} transition of order {pk} from {order.status} to {to_status}",
            extra={"order_id": str(pk), "status": order.status, "source": source},
        )
        return Err(InvalidTransition(f"Cannot move order from {order.status} to {to_status}"))

    @staticmethod
    def apply_discount(order: Order, discount_amount: Decimal, promo_code_id: Any) -> Order:
        """Record a redeemed discount on a pending order"""
        order.discount_amount = discount_amount
        order.price_total = max(order.original_price - discount_amount, Decimal("0.00"))
        order.promo_code_id = promo_code_id
        order.save(update_fields=["discount_amount", "price_total", "promo_code", "updated_at"])
        return order

    @staticmethod
    def attach_payment_session(order: Order, session_id: str) -> Order:
        order.stripe_session_id = session_id
        order.save(update_fields=["stripe_session_id", "updated_at"])
        return order


# ===============================================================================
# ORDER QUERY SERVICE
# ===============================================================================


class OrderQueryService:
    """Service for order querying with access rules"""

    @staticmethod
    def get_order(order_id: Any) -> Result[Order, BusinessError]:
        pk = parse_order_id(order_id)
        order = Order.objects.select_related("artist", "reviewer", "package").filter(pk=pk).first() if pk else None
        if order is None:
            return Err(OrderNotFound(f"Order {order_id} not found"))
        return Ok(order)

    @staticmethod
    def can_view(order: Order, user: Any) -> bool:
        """Artist, reviewer and platform admins may see an order"""
        if not user or not user.is_authenticated:
            return False
        return user.pk in (order.artist_id, order.reviewer_id) or user.is_platform_admin

    @classmethod
    def get_order_for_user(cls, order_id: Any, user: Any) -> Result[Order, BusinessError]:
        result = cls.get_order(order_id)
        if result.is_err():
            return result
        order = result.unwrap()
        if not cls.can_view(order, user):
            logger.warning(
                f"🔒 [Orders] User {getattr(user, 'pk', None)} denied access to order {order.id}",
                extra={"order_id": str(order.id), "user_id": getattr(user, "pk", None)},
            )
            return Err(AuthorizationError("You do not have access to this order"))
        return Ok(order)

    @staticmethod
    def orders_for_user(user: Any, status: str | None = None) -> QuerySet[Order]:
        queryset = Order.objects.select_related("package", "reviewer")
        if not user.is_platform_admin:
            queryset = queryset.filter(Q(artist=user) | Q(reviewer=user))
        if status:
            queryset = queryset.filter(status=status)
        return queryset.order_by("-created_at")
