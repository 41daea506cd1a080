from .models import (CommissionSetting, EarningsSummary, FeeExample, FeeSnapshot, ListingType,
                     PayoutRequest, PromotionPrices, VolumeTier)
from .rates import CommissionRateTable
from .tiers import VolumeIncentiveResolver
from .calculator import compute_fee, fee_examples
from .datasource import fetch_snapshot, registry
from .services import FeeService

__all__ = [
    "CommissionSetting", "EarningsSummary", "FeeExample", "FeeSnapshot", "ListingType",
    "PayoutRequest", "PromotionPrices", "VolumeTier", "CommissionRateTable", "VolumeIncentiveResolver",
    "compute_fee", "fee_examples", "fetch_snapshot", "registry", "FeeService",
]
