from pathlib import Path
import os
import shutil
import datetime
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import pandas as pd

import config
from .datasource import (SETTINGS_COLUMNS, default_settings, normalize_columns, parse_bool,
                         parse_number, read_csv_with_fallbacks)
from .models import ListingType

logger = logging.getLogger(__name__)


def _current_settings_frame(path: Path) -> pd.DataFrame:
    if path.exists():
        df = normalize_columns(read_csv_with_fallbacks(path))
        for col in SETTINGS_COLUMNS:
            if col not in df.columns:
                df[col] = True if col == "is_active" else None
        return df[SETTINGS_COLUMNS].copy()
    return pd.DataFrame(
        [
            {"listing_type": s.listing_type.value,
             "commission_rate": float(s.commission_rate_percent),
             "is_active": s.is_active}
            for s in default_settings()
        ],
        columns=SETTINGS_COLUMNS,
    )


def _write_settings(df: pd.DataFrame, path: Path, backup_dir: Optional[Path]) -> Optional[Path]:
    """
    Stage the frame next to the target, copy the current file into backup_dir
    when one is given, then swap the staged file in with os.replace.
    Returns the backup path, or None when no backup was taken.
    """
    stamp = datetime.datetime.now().strftime("%Y-%m-%d_%H%M%S")
    path.parent.mkdir(parents=True, exist_ok=True)
    staged = path.with_name(f".{path.stem}_{stamp}.tmp")
    df.to_csv(staged, index=False, encoding=config.ENCODING_OUTPUT)

    backup_path = None
    try:
        if backup_dir is not None and path.exists():
            backup_dir.mkdir(parents=True, exist_ok=True)
            backup_path = backup_dir / f"{path.stem}_{stamp}{path.suffix}"
            shutil.copy2(path, backup_path)
            logger.info(f"Backed up {path.name} to {backup_path}")
        # same directory, so the swap never crosses filesystems
        os.replace(staged, path)
    finally:
        if staged.exists():
            staged.unlink()
    logger.info(f"Commission settings written: {path}")
    return backup_path


def update_commission_setting(listing_type: Any,
                              rate: Any = None,
                              is_active: Optional[bool] = None,
                              path: Path = None,
                              backup: bool = False,
                              backup_dir: Path = None) -> Dict[str, Any]:
    """
    Change one listing type's rate and/or active flag in the settings CSV.
    Raises ValueError for an unknown listing type or a rate outside 0–100.
    """
    lt = ListingType.parse(listing_type)
    if lt is None:
        raise ValueError(f"Unknown listing type: {listing_type}")

    new_rate: Optional[Decimal] = None
    if rate is not None:
        new_rate = parse_number(rate)
        lo = Decimal(str(config.MIN_COMMISSION_VALUE))
        hi = Decimal(str(config.MAX_COMMISSION_VALUE))
        if new_rate is None or not (lo <= new_rate <= hi):
            raise ValueError(f"Commission rate must be between {lo} and {hi}: {rate}")

    path = Path(path or config.COMMISSION_SETTINGS_CSV)
    df = _current_settings_frame(path)
    df["is_active"] = df["is_active"].map(parse_bool)

    mask = df["listing_type"] == lt.value
    if not mask.any():
        if new_rate is None:
            raise ValueError(f"No existing setting for {lt.value}; a rate is required")
        df = pd.concat(
            [df, pd.DataFrame([{"listing_type": lt.value, "commission_rate": None, "is_active": True}])],
            ignore_index=True,
        )
        mask = df["listing_type"] == lt.value

    if new_rate is not None:
        df.loc[mask, "commission_rate"] = float(new_rate)
    if is_active is not None:
        df.loc[mask, "is_active"] = parse_bool(is_active)

    backup_path = _write_settings(df, path, Path(backup_dir or config.BACKUP_DIR) if backup else None)

    row = df.loc[mask].iloc[0]
    current_rate = parse_number(row["commission_rate"])
    return {
        "listingType": lt.value,
        "commissionRate": float(current_rate) if current_rate is not None else None,
        "isActive": parse_bool(row["is_active"]),
        "csvPath": str(path),
        "backupPath": str(backup_path) if backup_path else None,
    }
