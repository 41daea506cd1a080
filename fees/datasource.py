import datetime as dt
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

import config
from .interfaces import BaseConfigSource
from .models import CommissionSetting, FeeSnapshot, ListingType, PromotionPrices, parse_decimal
from .registry import SourceRegistry
from .tiers import build_tiers

logger = logging.getLogger(__name__)

SETTINGS_COLUMNS = ["listing_type", "commission_rate", "is_active"]


# ---------- IO / CONVERSIONS ----------
def read_csv_with_fallbacks(path: Path) -> pd.DataFrame:
    try:
        return pd.read_csv(path, encoding=config.ENCODING_OUTPUT)
    except UnicodeDecodeError:
        return pd.read_csv(path, encoding="cp1252")


def normalize_columns(df: pd.DataFrame, aliases: Dict[str, List[str]] = None) -> pd.DataFrame:
    """Rename known header aliases to their canonical column names."""
    aliases = aliases or config.HEADER_ALIASES
    rename_map = {}
    for col in df.columns:
        key = str(col).strip().lower()
        for canonical, names in aliases.items():
            if key in names and canonical not in rename_map.values():
                rename_map[col] = canonical
                break
    df = df.rename(columns=rename_map)
    for col in ("listing_type", "promotion_type"):
        if col in df.columns:
            df[col] = df[col].astype(str).str.strip().str.lower()
    return df


def parse_number(val: Any) -> Optional[Decimal]:
    # Same rule as user input: a comma is a thousands separator
    return parse_decimal(val)


def parse_bool(val: Any, default: bool = True) -> bool:
    if val is None:
        return default
    if isinstance(val, bool):
        return val
    if isinstance(val, float) and pd.isna(val):
        return default
    return str(val).strip().lower() in ("true", "1", "yes", "on", "t", "y")


def settings_from_frame(df: pd.DataFrame) -> Tuple[CommissionSetting, ...]:
    df = normalize_columns(df)
    missing = [c for c in ("listing_type", "commission_rate") if c not in df.columns]
    if missing:
        raise ValueError(f"Commission settings missing columns: {', '.join(missing)}")

    lo = Decimal(str(config.MIN_COMMISSION_VALUE))
    hi = Decimal(str(config.MAX_COMMISSION_VALUE))

    out: List[CommissionSetting] = []
    for row in df.to_dict(orient="records"):
        lt = ListingType.parse(row.get("listing_type"))
        if lt is None:
            logger.warning(f"Skipping unknown listing type: {row.get('listing_type')!r}")
            continue
        rate = parse_number(row.get("commission_rate"))
        if rate is None or not (lo <= rate <= hi):
            logger.warning(f"Skipping {lt.value}: commission rate {row.get('commission_rate')!r} out of range")
            continue
        out.append(CommissionSetting(lt, rate, parse_bool(row.get("is_active"))))
    return tuple(out)


def promotions_from_frame(df: Optional[pd.DataFrame]) -> PromotionPrices:
    prices = {k: Decimal(str(v)) for k, v in config.DEFAULT_PROMOTION_PRICES.items()}
    if df is not None:
        df = normalize_columns(df)
        if "promotion_type" in df.columns and "price" in df.columns:
            for row in df.to_dict(orient="records"):
                key = row.get("promotion_type")
                if key not in prices or not parse_bool(row.get("is_active")):
                    continue
                price = parse_number(row.get("price"))
                if price is None or price < 0:
                    logger.warning(f"Ignoring price {row.get('price')!r} for {key}")
                    continue
                prices[key] = price
        else:
            logger.warning("Promotion settings have no promotion_type/price columns, using defaults")
    return PromotionPrices(**prices)


def default_settings() -> Tuple[CommissionSetting, ...]:
    return tuple(
        CommissionSetting(ListingType(k), Decimal(str(v)), True)
        for k, v in config.DEFAULT_COMMISSION_SETTINGS.items()
    )


def _snapshot(settings, promotions, source: str) -> FeeSnapshot:
    return FeeSnapshot(
        settings=settings,
        tiers=build_tiers(config.VOLUME_TIERS),
        promotions=promotions,
        source=source,
        loaded_at=dt.datetime.now().isoformat(timespec="seconds"),
        default_rate=Decimal(str(config.DEFAULT_COMMISSION_RATE)),
    )


# ---------- SOURCES ----------
class DefaultConfigSource(BaseConfigSource):
    code = "defaults"

    def load(self) -> FeeSnapshot:
        return _snapshot(default_settings(), promotions_from_frame(None), self.code)


class CSVConfigSource(BaseConfigSource):
    """
    Commission and promotion settings from CSV files.
    A missing file falls back to the built-in defaults; a malformed one raises.
    """
    code = "csv"

    def __init__(self, settings_path: Path = None, promotions_path: Path = None):
        self.settings_path = Path(settings_path or config.COMMISSION_SETTINGS_CSV)
        self.promotions_path = Path(promotions_path or config.PROMOTION_SETTINGS_CSV)

    def load(self) -> FeeSnapshot:
        if self.settings_path.exists():
            settings = settings_from_frame(read_csv_with_fallbacks(self.settings_path))
            logger.info(f"Loaded {len(settings)} commission settings from {self.settings_path}")
        else:
            logger.warning(f"Commission settings not found: {self.settings_path}, using defaults")
            settings = default_settings()

        promo_df = None
        if self.promotions_path.exists():
            promo_df = read_csv_with_fallbacks(self.promotions_path)
        else:
            logger.warning(f"Promotion settings not found: {self.promotions_path}, using defaults")

        return _snapshot(settings, promotions_from_frame(promo_df), self.code)

    def fingerprint(self) -> Optional[Dict[str, float]]:
        out = {}
        for p in (self.settings_path, self.promotions_path):
            out[str(p)] = p.stat().st_mtime if p.exists() else -1.0
        return out


registry = SourceRegistry(CSVConfigSource, DefaultConfigSource)


def fetch_snapshot(source: str = None) -> FeeSnapshot:
    """Single configuration fetch; returns an immutable snapshot."""
    return registry.resolve(source or config.CONFIG_SOURCE).load()
