#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent

DATA_DIR   = BASE_DIR / "data"
BACKUP_DIR = DATA_DIR / "backup"

COMMISSION_SETTINGS_FILE = "commission_settings.csv"
PROMOTION_SETTINGS_FILE  = "promotion_settings.csv"

ENCODING_OUTPUT = "utf-8-sig"

# Logging
LOG_LEVEL      = "INFO"
LOG_FORMAT     = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT= "%Y-%m-%d %H:%M:%S"

# "csv" reads DATA_DIR, "defaults" uses the built-in table
CONFIG_SOURCE = "csv"

# Commission
DEFAULT_COMMISSION_RATE = 5.0
MIN_COMMISSION_VALUE    = 0.0
MAX_COMMISSION_VALUE    = 100.0

DEFAULT_COMMISSION_SETTINGS = {
    "buy_it_now": 5.0,
    "make_offer": 5.0,
    "classified": 3.0,
}

# Volume incentives: (tier, minimum monthly volume in USD, rate %)
VOLUME_TIERS = [
    ("Standard", 0,    5.0),
    ("Silver",   1000, 4.5),
    ("Gold",     2500, 4.0),
    ("Diamond",  5000, 3.5),
]

# Promotion prices (USD) used when the settings file has no active row
DEFAULT_PROMOTION_PRICES = {
    "featured_listing":   2.99,
    "top_placement":      4.99,
    "homepage_spotlight": 9.99,
    "video_upload":       2.99,
}

# Sale amounts shown on the fees page
FEE_EXAMPLE_AMOUNTS = (25, 50, 100, 250, 500)

# Column aliases accepted in the settings CSVs
HEADER_ALIASES = {
    "listing_type": [
        "listing_type", "listing type", "type", "listingtype",
    ],
    "commission_rate": [
        "commission_rate", "commission rate", "commission", "rate",
        "commission %", "commission_rate_percent",
    ],
    "is_active": [
        "is_active", "active", "enabled",
    ],
    "promotion_type": [
        "promotion_type", "promotion type", "promotion",
    ],
    "price": [
        "price", "amount", "fee",
    ],
}

# HTTP
HOST = "127.0.0.1"
PORT = 5000


def get_env_or_default(env_var: str, default_value):
    """Read an environment variable, coerced to the type of the default."""
    env_value = os.getenv(env_var)
    if env_value is None:
        return default_value

    # Boolean conversion
    if isinstance(default_value, bool):
        return env_value.lower() in ('true', '1', 'yes', 'on')

    # Numeric conversion
    if isinstance(default_value, (int, float)):
        try:
            return type(default_value)(env_value)
        except ValueError:
            return default_value

    return env_value


LOG_LEVEL               = get_env_or_default("FEEKIT_LOG_LEVEL", LOG_LEVEL)
CONFIG_SOURCE           = get_env_or_default("FEEKIT_CONFIG_SOURCE", CONFIG_SOURCE)
DEFAULT_COMMISSION_RATE = get_env_or_default("FEEKIT_DEFAULT_RATE", DEFAULT_COMMISSION_RATE)
PORT                    = get_env_or_default("PORT", PORT)

DATA_DIR   = Path(get_env_or_default("FEEKIT_DATA_DIR", DATA_DIR)).resolve()
BACKUP_DIR = Path(get_env_or_default("FEEKIT_BACKUP_DIR", DATA_DIR / "backup"))

COMMISSION_SETTINGS_CSV = DATA_DIR / COMMISSION_SETTINGS_FILE
PROMOTION_SETTINGS_CSV  = DATA_DIR / PROMOTION_SETTINGS_FILE
