import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

import config
from .calculator import compute_fee, fee_examples
from .earnings import record_sale, request_payout, summarize_earnings
from .interfaces import BaseConfigSource
from .models import EarningsSummary, FeeExample, FeeSnapshot, PayoutRequest, SaleRecord, VolumeTier
from .rates import CommissionRateTable
from .registry import SourceRegistry
from .tiers import VolumeIncentiveResolver

logger = logging.getLogger(__name__)


class FeeService:
    """
    Binds the calculator to one configuration snapshot.

    The snapshot is replaced as a whole on reload; readers holding the old
    rate table or resolver keep a consistent view.
    """

    def __init__(self, registry: SourceRegistry, source: str = None):
        self._reg = registry
        self.source_code = source or config.CONFIG_SOURCE
        self._source: BaseConfigSource = self._reg.resolve(self.source_code)
        self._fingerprint: Optional[Dict[str, float]] = None
        self.snapshot: FeeSnapshot = None
        self.rates: CommissionRateTable = None
        self.tiers: VolumeIncentiveResolver = None

        try:
            self._apply(self._source.load())
        except Exception as e:
            logger.warning(f"{self.source_code} source could not be loaded, using defaults: {e}")
            self._apply(self._reg.resolve("defaults").load())
        self._fingerprint = self._source.fingerprint()

    # ---------- SNAPSHOT ----------
    def _apply(self, snapshot: FeeSnapshot) -> None:
        rates = CommissionRateTable(snapshot.settings, snapshot.default_rate)
        tiers = VolumeIncentiveResolver(snapshot.tiers)
        self.snapshot, self.rates, self.tiers = snapshot, rates, tiers

    def refresh_if_changed(self, force: bool = False) -> bool:
        fp = self._source.fingerprint()
        if not force and fp == self._fingerprint:
            return False
        try:
            self._apply(self._source.load())
        except Exception as e:
            logger.warning(f"Reload of {self.source_code} failed, keeping previous snapshot: {e}")
            return False
        self._fingerprint = fp
        return True

    # ---------- QUERIES ----------
    def rate_for(self, listing_type: Any) -> Decimal:
        return self.rates.rate_for(listing_type)

    def tier_for(self, monthly_volume: Any) -> VolumeTier:
        return self.tiers.tier_for(monthly_volume)

    def active_settings(self) -> List[Dict[str, Any]]:
        return [s.to_dict() for s in self.rates.active_settings()]

    def volume_tiers(self) -> List[Dict[str, Any]]:
        return [t.to_dict() for t in self.tiers.tiers]

    def promotion_prices(self) -> Dict[str, float]:
        return self.snapshot.promotions.to_dict()

    # ---------- CALCULATION ----------
    def compute_fee(self, sale_amount: Any, listing_type: Any,
                    rate_override: Any = None, promotion_fee: Any = 0) -> FeeExample:
        return compute_fee(self.rates, sale_amount, listing_type, rate_override, promotion_fee)

    def compute_fee_for_volume(self, sale_amount: Any, listing_type: Any,
                               monthly_volume: Any, promotion_fee: Any = 0) -> FeeExample:
        tier = self.tier_for(monthly_volume)
        return compute_fee(self.rates, sale_amount, listing_type,
                           rate_override=tier.commission_rate_percent,
                           promotion_fee=promotion_fee,
                           tier_name=tier.tier_name)

    def fee_examples(self, amounts: Iterable[Any] = None) -> List[FeeExample]:
        return fee_examples(self.rates, amounts if amounts is not None else config.FEE_EXAMPLE_AMOUNTS)

    def record_sale(self, seller_id: str, sale_amount: Any, listing_type: Any, **kwargs) -> SaleRecord:
        return record_sale(self.rates, seller_id, sale_amount, listing_type, **kwargs)

    def summarize_earnings(self, rows: Iterable[Dict[str, Any]]) -> EarningsSummary:
        return summarize_earnings(rows)

    def request_payout(self, rows: Iterable[Dict[str, Any]], seller_id: str = None,
                       payout_method: str = "bank_transfer",
                       payout_details: Any = None) -> Tuple[PayoutRequest, List[Dict[str, Any]]]:
        return request_payout(rows, seller_id, payout_method, payout_details)

    def health(self) -> Dict[str, Any]:
        return {
            "source": self.snapshot.source,
            "loadedAt": self.snapshot.loaded_at,
            "settings": len(self.snapshot.settings),
            "tiers": len(self.snapshot.tiers),
            "defaultRate": float(self.snapshot.default_rate),
        }
