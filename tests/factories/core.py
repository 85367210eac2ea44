# ===============================================================================
# TEST FACTORIES FOR USERS, PACKAGES, PROMO CODES AND ORDERS
# ===============================================================================

from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.orders.models import Order
from apps.packages.models import ReviewerPackage
from apps.promotions.models import PromoCode

User = get_user_model()

_counter = {'value': 0}


def _next() -> int:
    _counter['value'] += 1
    return _counter['value']


def create_artist(email: str | None = None) -> User:
    """Create a buying artist."""
    return User.objects.create_user(
        email=email or f'artist{_next()}@example.com', password='testpass123', role=User.ROLE_ARTIST
    )


def create_reviewer(email: str | None = None) -> User:
    """Create a reviewer who sells packages."""
    return User.objects.create_user(
        email=email or f'reviewer{_next()}@example.com',
        password='testpass123',
        role=User.ROLE_REVIEWER,
        display_name='Test Reviewer',
    )


def create_admin(email: str | None = None) -> User:
    return User.objects.create_user(
        email=email or f'admin{_next()}@example.com', password='testpass123', role=User.ROLE_ADMIN
    )


def create_package(
    reviewer: User,
    price: Decimal = Decimal('50.00'),
    review_types: list[str] | None = None,
    is_active: bool = True,
    name: str = 'Standard Review',
) -> ReviewerPackage:
    """Create a package; scorecard + written unless told otherwise."""
    return ReviewerPackage.objects.create(
        reviewer=reviewer,
        name=name,
        price=price,
        review_types=['scorecard', 'written'] if review_types is None else review_types,
        is_active=is_active,
    )


def create_promo_code(  # noqa: PLR0913
    code: str = 'SAVE10',
    discount_type: str = PromoCode.DISCOUNT_PERCENTAGE,
    discount_value: Decimal = Decimal('10'),
    max_uses: int | None = None,
    current_uses: int = 0,
    is_active: bool = True,
    valid_from=None,
    valid_until=None,
) -> PromoCode:
    return PromoCode.objects.create(
        code=code,
        discount_type=discount_type,
        discount_value=discount_value,
        max_uses=max_uses,
        current_uses=current_uses,
        is_active=is_active,
        valid_from=valid_from or timezone.now() - timedelta(days=1),
        valid_until=valid_until,
    )


# ===============================================================================
# ORDER FACTORY PARAMETER OBJECTS
# ===============================================================================

@dataclass
class OrderCreationRequest:
    """Parameter object for order creation"""
    package: ReviewerPackage
    artist: User | None = None
    guest_email: str = ''
    status: str = Order.STATUS_PENDING
    stripe_session_id: str = ''
    required_review_types: list[str] | None = None
    extra: dict = field(default_factory=dict)


def create_order(request: OrderCreationRequest) -> Order:
    """Create an order directly in any status, bypassing checkout."""
    now = timezone.now()
    required = request.package.review_types if request.required_review_types is None else request.required_review_types
    return Order.objects.create(
        artist=request.artist,
        guest_email=request.guest_email if request.artist is None else '',
        reviewer=request.package.reviewer,
        package=request.package,
        track_url='https://soundcloud.com/example/track',
        track_title='Night Drive',
        original_price=request.package.price,
        price_total=request.package.price,
        status=request.status,
        stripe_session_id=request.stripe_session_id,
        required_review_types=list(required),
        paid_at=now if request.status != Order.STATUS_PENDING else None,
        completed_at=now if request.status == Order.STATUS_COMPLETED else None,
        **request.extra,
    )


# ===============================================================================
# REVIEW PAYLOAD BUILDERS
# ===============================================================================

def build_scorecard(size: int = 16) -> list[dict]:
    return [{'metric': f'Metric {i}', 'score': 7} for i in range(1, size + 1)]


def build_review_payload(**overrides) -> dict:
    """A payload that satisfies a scorecard + written package."""
    payload = {
        'reviewer_title': 'Senior A&R',
        'summary': 'S' * 120,
        'tags': ['synthwave', 'mixing'],
        'overall_rating': 4,
        'scorecard': build_scorecard(),
        'written_feedback': 'W' * 1200,
        'highlights': ['Great hook'],
    }
    payload.update(overrides)
    return payload
