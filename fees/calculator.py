"""
Fee example calculator.

    commission = sale_amount * rate / 100
    net        = sale_amount - commission - promotion_fee

All arithmetic runs on Decimal at full precision; only the two reported
amounts are rounded (half-up, 2 places). Nothing here raises on bad input:
malformed amounts count as 0 and unknown listing types get the default rate.
"""
import logging
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from .models import (HUNDRED, ZERO, FeeExample, ListingType, digit_span, money, non_negative, to_decimal,
                     wide_context)
from .rates import CommissionRateTable

logger = logging.getLogger(__name__)


def clamp_rate(rate: Any) -> Decimal:
    r = to_decimal(rate)
    if r < ZERO:
        logger.debug(f"Rate {rate!r} below 0, clamped")
        return ZERO
    if r > HUNDRED:
        logger.debug(f"Rate {rate!r} above 100, clamped")
        return HUNDRED
    return r


def resolve_rate(table: CommissionRateTable, listing_type: Any, rate_override: Any = None) -> Decimal:
    if rate_override is not None:
        return clamp_rate(rate_override)
    return table.rate_for(listing_type)


def compute_fee(table: CommissionRateTable,
                sale_amount: Any,
                listing_type: Any,
                rate_override: Any = None,
                promotion_fee: Any = 0,
                tier_name: Optional[str] = None) -> FeeExample:
    amount = non_negative(sale_amount)
    promo = non_negative(promotion_fee)
    rate = resolve_rate(table, listing_type, rate_override)

    # The product carries the digits of both factors; keep all of them until rounding
    with wide_context(digit_span(amount, promo) + len(rate.as_tuple().digits) + 2):
        commission = amount * rate / HUNDRED
        net = amount - commission - promo
        commission_amount, net_earnings = money(commission), money(net)

    return FeeExample(
        sale_amount=amount,
        listing_type=ListingType.parse(listing_type),
        commission_rate_percent=rate,
        commission_amount=commission_amount,
        net_earnings=net_earnings,
        promotion_fee=money(promo),
        tier_name=tier_name,
    )


def fee_examples(table: CommissionRateTable,
                 amounts: Iterable[Any],
                 listing_types: Optional[Iterable[ListingType]] = None) -> List[FeeExample]:
    """One example per amount and listing type, amounts in the given order."""
    types = list(listing_types) if listing_types is not None else list(ListingType)
    return [compute_fee(table, a, lt) for a in amounts for lt in types]
