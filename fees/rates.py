import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from .models import CommissionSetting, ListingType

logger = logging.getLogger(__name__)

DEFAULT_RATE = Decimal("5.0")


class CommissionRateTable:
    """
    Active commission rate per listing type.

    Only active settings take part in the lookup. A listing type that is not
    recognised, or that has no active setting, resolves to the default rate.
    """

    def __init__(self, settings: Iterable[CommissionSetting], default_rate: Decimal = DEFAULT_RATE):
        self.default_rate = Decimal(default_rate)
        self._rates: Dict[ListingType, Decimal] = {}
        for s in settings:
            if not s.is_active:
                continue
            if s.listing_type in self._rates:
                logger.warning(f"Duplicate active setting for {s.listing_type.value}, keeping the first")
                continue
            self._rates[s.listing_type] = s.commission_rate_percent

    def rate_for(self, listing_type: Any) -> Decimal:
        lt = ListingType.parse(listing_type)
        if lt is None:
            logger.debug(f"Unknown listing type {listing_type!r}, using default rate")
            return self.default_rate
        return self._rates.get(lt, self.default_rate)

    def is_default(self, listing_type: Any) -> bool:
        lt = ListingType.parse(listing_type)
        return lt is None or lt not in self._rates

    def active_settings(self) -> List[CommissionSetting]:
        # Declaration order of ListingType, matching the fees page
        return [CommissionSetting(lt, self._rates[lt], True) for lt in ListingType if lt in self._rates]
