from __future__ import annotations
from dataclasses import dataclass, field
from decimal import MAX_EMAX, MIN_EMIN, ROUND_HALF_UP, Decimal, InvalidOperation, getcontext, localcontext
from enum import Enum
from typing import Any, Dict, Optional, Tuple, TypedDict

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

# Upper bound on working precision; beyond it digits below the cent are lost
MAX_DIGITS = 1000


class ListingType(str, Enum):
    BUY_IT_NOW = "buy_it_now"
    MAKE_OFFER = "make_offer"
    CLASSIFIED = "classified"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> Optional["ListingType"]:
        """Return the matching member, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        key = str(value).strip().lower().replace(" ", "_").replace("-", "_")
        for member in cls:
            if member.value == key:
                return member
        return None


_LABELS = {
    ListingType.BUY_IT_NOW: "Buy It Now",
    ListingType.MAKE_OFFER: "Make Offer",
    ListingType.CLASSIFIED: "Classified Ads",
}


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse user or CSV input to a finite Decimal, or None when it does not parse.
    Strings may carry '$' or '%'. A comma is always a thousands separator
    and is dropped, so "1,000" reads as 1000 and "4,5" as 45.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        d = value
    else:
        s = str(value).strip().replace("$", "").replace("%", "").replace(",", "")
        if not s:
            return None
        try:
            d = Decimal(s)
        except (InvalidOperation, ValueError):
            return None
    return d if d.is_finite() else None


def to_decimal(value: Any) -> Decimal:
    """Like parse_decimal, but anything unparseable becomes 0."""
    d = parse_decimal(value)
    return ZERO if d is None else d


def non_negative(value: Any) -> Decimal:
    d = to_decimal(value)
    return d if d > ZERO else ZERO


def wide_context(digits: int):
    """Local Decimal context with at least `digits` of precision and the full exponent range."""
    ctx = getcontext().copy()
    ctx.prec = max(ctx.prec, min(digits, MAX_DIGITS))
    ctx.Emax, ctx.Emin = MAX_EMAX, MIN_EMIN
    return localcontext(ctx)


def digit_span(*values: Decimal) -> int:
    """Digits from the largest leading digit of values down to the smaller of their last digit and cents."""
    top = max([v.adjusted() for v in values] + [0]) + 2
    bottom = min([v.as_tuple().exponent for v in values] + [-2])
    return top - bottom + 1


def money(value: Decimal) -> Decimal:
    """Round half-up to cents, whatever the magnitude of value."""
    with wide_context(value.adjusted() + 3) as ctx:
        if value.adjusted() + 3 > ctx.prec:
            return value
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CommissionSetting:
    listing_type: ListingType
    commission_rate_percent: Decimal
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "listingType": self.listing_type.value,
            "label": self.listing_type.label,
            "commissionRate": float(self.commission_rate_percent),
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class VolumeTier:
    tier_name: str
    minimum_monthly_volume: Decimal
    commission_rate_percent: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tier": self.tier_name,
            "minimumMonthlyVolume": float(self.minimum_monthly_volume),
            "rate": float(self.commission_rate_percent),
        }


@dataclass(frozen=True)
class FeeExample:
    sale_amount: Decimal
    listing_type: Optional[ListingType]
    commission_rate_percent: Decimal
    commission_amount: Decimal
    net_earnings: Decimal
    promotion_fee: Decimal = ZERO
    tier_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "saleAmount": float(self.sale_amount),
            "listingType": self.listing_type.value if self.listing_type else None,
            "commissionRate": float(self.commission_rate_percent),
            "commissionAmount": float(self.commission_amount),
            "promotionFee": float(self.promotion_fee),
            "netEarnings": float(self.net_earnings),
            "tier": self.tier_name,
        }


@dataclass(frozen=True)
class PromotionPrices:
    featured_listing: Decimal
    top_placement: Decimal
    homepage_spotlight: Decimal
    video_upload: Decimal

    def to_dict(self) -> Dict[str, float]:
        return {
            "featured_listing": float(self.featured_listing),
            "top_placement": float(self.top_placement),
            "homepage_spotlight": float(self.homepage_spotlight),
            "video_upload": float(self.video_upload),
        }


@dataclass(frozen=True)
class FeeSnapshot:
    settings: Tuple[CommissionSetting, ...]
    tiers: Tuple[VolumeTier, ...]
    promotions: PromotionPrices
    source: str = "defaults"
    loaded_at: str = ""
    default_rate: Decimal = field(default=Decimal("5.0"))


@dataclass(frozen=True)
class EarningsSummary:
    total_sales: Decimal = ZERO
    total_commissions: Decimal = ZERO
    total_promotion_fees: Decimal = ZERO
    available_earnings: Decimal = ZERO
    pending_earnings: Decimal = ZERO

    def to_dict(self) -> Dict[str, float]:
        return {
            "total_sales": float(self.total_sales),
            "total_commissions": float(self.total_commissions),
            "total_promotion_fees": float(self.total_promotion_fees),
            "available_earnings": float(self.available_earnings),
            "pending_earnings": float(self.pending_earnings),
        }


class SaleRecord(TypedDict, total=False):
    seller_id: str
    product_id: Optional[str]
    bundle_id: Optional[str]
    sale_amount: float
    commission_rate: float
    commission_amount: float
    promotion_fees: float
    net_earnings: float
    listing_type: str
    status: str


@dataclass(frozen=True)
class PayoutRequest:
    seller_id: Optional[str]
    requested_amount: Decimal
    final_payout_amount: Decimal
    payout_method: str
    payout_details: Any = None
    # Commission and promotion fees are already deducted from the earnings paid out
    total_commission: Decimal = ZERO
    total_promotion_fees: Decimal = ZERO
    status: str = "pending"
    requested_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seller_id": self.seller_id,
            "requested_amount": float(self.requested_amount),
            "total_commission": float(self.total_commission),
            "total_promotion_fees": float(self.total_promotion_fees),
            "final_payout_amount": float(self.final_payout_amount),
            "payout_method": self.payout_method,
            "payout_details": self.payout_details,
            "status": self.status,
            "requested_at": self.requested_at,
        }
