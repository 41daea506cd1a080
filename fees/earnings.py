import datetime as dt
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .calculator import compute_fee
from .models import EarningsSummary, PayoutRequest, SaleRecord, digit_span, money, to_decimal, wide_context
from .rates import CommissionRateTable

logger = logging.getLogger(__name__)

AMOUNT_COLUMNS = ["sale_amount", "commission_amount", "promotion_fees", "net_earnings"]

STATUS_AVAILABLE = "available"
STATUS_PENDING = "pending"
STATUS_PAID_OUT = "paid_out"


def record_sale(table: CommissionRateTable,
                seller_id: str,
                sale_amount: Any,
                listing_type: Any,
                promotion_fees: Any = 0,
                product_id: Optional[str] = None,
                bundle_id: Optional[str] = None) -> SaleRecord:
    """Earning row for a completed sale; immediately available for payout."""
    fee = compute_fee(table, sale_amount, listing_type, promotion_fee=promotion_fees)
    return SaleRecord(
        seller_id=seller_id,
        product_id=product_id,
        bundle_id=bundle_id,
        sale_amount=float(fee.sale_amount),
        commission_rate=float(fee.commission_rate_percent),
        commission_amount=float(fee.commission_amount),
        promotion_fees=float(fee.promotion_fee),
        net_earnings=float(fee.net_earnings),
        listing_type=fee.listing_type.value if fee.listing_type else str(listing_type),
        status=STATUS_AVAILABLE,
    )


def _column_total(series: pd.Series) -> Decimal:
    values = [to_decimal(v) for v in series.tolist()]
    with wide_context(digit_span(*values) + len(str(len(values)))):
        return sum(values, Decimal("0"))


def _earnings_frame(rows: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame(list(rows or []))
    if df.empty:
        return df
    for col in AMOUNT_COLUMNS:
        if col not in df.columns:
            df[col] = 0
    for col in ("status", "seller_id"):
        if col not in df.columns:
            df[col] = ""
    df["status"] = df["status"].fillna("").astype(str).str.strip().str.lower()
    return df


def summarize_earnings(rows: Iterable[Dict[str, Any]]) -> EarningsSummary:
    """
    Totals over a seller's earning rows.
    Net earnings are split by status: 'available' and 'pending' each get their
    own bucket, anything else (e.g. 'paid_out') only counts in the totals.
    """
    df = _earnings_frame(rows)
    if df.empty:
        return EarningsSummary()

    available = df.loc[df["status"] == STATUS_AVAILABLE, "net_earnings"]
    pending = df.loc[df["status"] == STATUS_PENDING, "net_earnings"]

    return EarningsSummary(
        total_sales=money(_column_total(df["sale_amount"])),
        total_commissions=money(_column_total(df["commission_amount"])),
        total_promotion_fees=money(_column_total(df["promotion_fees"])),
        available_earnings=money(_column_total(available)),
        pending_earnings=money(_column_total(pending)),
    )


def request_payout(rows: Iterable[Dict[str, Any]],
                   seller_id: Optional[str] = None,
                   payout_method: str = "bank_transfer",
                   payout_details: Any = None) -> Tuple[PayoutRequest, List[Dict[str, Any]]]:
    """
    Withdraw all available earnings.

    The payout amount is the sum of net earnings with status 'available'
    (restricted to seller_id when given). Those rows come back with status
    'paid_out'; every other row is returned unchanged. Raises ValueError when
    nothing is available.
    """
    rows = [dict(r) for r in (rows or [])]
    df = _earnings_frame(rows)
    if df.empty:
        raise ValueError("No available earnings to withdraw")

    mask = df["status"] == STATUS_AVAILABLE
    if seller_id is not None:
        mask &= df["seller_id"].fillna("").astype(str) == str(seller_id)

    amount = money(_column_total(df.loc[mask, "net_earnings"]))
    if amount <= 0:
        raise ValueError("No available earnings to withdraw")

    for i in df.index[mask]:
        rows[i]["status"] = STATUS_PAID_OUT

    payout = PayoutRequest(
        seller_id=seller_id,
        requested_amount=amount,
        final_payout_amount=amount,
        payout_method=payout_method,
        payout_details=payout_details,
        requested_at=dt.datetime.now().isoformat(timespec="seconds"),
    )
    logger.info(f"Payout of {amount} requested for {seller_id or 'all sellers'}, {int(mask.sum())} earnings paid out")
    return payout, rows
