import logging
from decimal import Decimal
from typing import Any, Iterable, List, Sequence, Tuple

from .models import VolumeTier, non_negative

logger = logging.getLogger(__name__)


def build_tiers(rows: Iterable[Sequence[Any]]) -> Tuple[VolumeTier, ...]:
    """(name, minimum volume, rate) rows → tiers sorted by minimum volume."""
    tiers = [
        VolumeTier(
            tier_name=str(name),
            minimum_monthly_volume=Decimal(str(minimum)),
            commission_rate_percent=Decimal(str(rate)),
        )
        for name, minimum, rate in rows
    ]
    tiers.sort(key=lambda t: t.minimum_monthly_volume)
    return tuple(tiers)


class VolumeIncentiveResolver:
    """Maps a seller's trailing monthly sales volume to a commission tier."""

    def __init__(self, tiers: Iterable[VolumeTier]):
        self._tiers: List[VolumeTier] = sorted(tiers, key=lambda t: t.minimum_monthly_volume)
        if not self._tiers:
            raise ValueError("At least one volume tier is required")
        if self._tiers[0].minimum_monthly_volume > 0:
            logger.warning(
                f"Lowest tier {self._tiers[0].tier_name} starts at "
                f"{self._tiers[0].minimum_monthly_volume}; smaller volumes still map to it"
            )

    @property
    def tiers(self) -> List[VolumeTier]:
        return list(self._tiers)

    def tier_for(self, monthly_volume: Any) -> VolumeTier:
        # Negative or malformed volume counts as no volume
        volume = non_negative(monthly_volume)
        for tier in reversed(self._tiers):
            if volume >= tier.minimum_monthly_volume:
                return tier
        return self._tiers[0]
