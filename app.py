#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from flask import Flask, request, jsonify
from flask_cors import CORS
import logging
from typing import Any, Dict

import config
from fees.datasource import parse_bool, registry
from fees.models import ListingType
from fees.services import FeeService
from fees.storage import update_commission_setting

# ==================== FLASK ====================
app = Flask(__name__)
CORS(app)


def setup_logging(level: str = config.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=config.LOG_FORMAT,
        datefmt=config.LOG_DATE_FORMAT,
    )


# ==================== SERVICE ====================
fee_service = FeeService(registry)


def _body() -> Dict[str, Any]:
    return request.get_json(silent=True) or {}


def _optional(value: Any) -> Any:
    # Empty form fields arrive as "" and mean "not given"
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return None
    return value


# ==================== HOT-RELOAD ====================
@app.before_request
def _auto_refresh():
    try:
        fee_service.refresh_if_changed()
    except Exception as e:
        app.logger.warning(f"Settings auto-reload failed: {e}")


# ==================== ROUTES ====================
# ---- Health & Admin ----
@app.get("/api/health")
def health_check():
    return jsonify({"success": True, "message": "API OK", "data": fee_service.health()})


@app.post("/api/reload")
def manual_reload():
    changed = fee_service.refresh_if_changed(force=True)
    return jsonify({"success": True, "reloaded": changed, "data": fee_service.health()})


@app.post("/api/admin/commission-settings")
def update_setting():
    try:
        params = _body()
        listing_type = params.get("listingType")
        if not listing_type:
            return jsonify({"success": False, "error": "listingType is required"}), 400
        is_active = _optional(params.get("isActive"))
        result = update_commission_setting(
            listing_type,
            rate=_optional(params.get("commissionRate")),
            is_active=None if is_active is None else parse_bool(is_active),
            backup=parse_bool(params.get("backup"), default=False),
        )
        fee_service.refresh_if_changed(force=True)
        return jsonify({"success": True, "data": result})
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except Exception as e:
        return jsonify({"success": False, "error": str(e)}), 500


# ---- Rates & tiers ----
@app.get("/api/commission-settings")
def get_commission_settings():
    try:
        return jsonify({"success": True, "data": fee_service.active_settings()})
    except Exception as e:
        return jsonify({"success": False, "error": str(e)}), 500


@app.get("/api/commission-rate")
def get_commission_rate():
    try:
        listing_type = request.args.get("listingType", "")
        rate = fee_service.rate_for(listing_type)
        lt = ListingType.parse(listing_type)
        return jsonify({"success": True,
                        "data": float(rate),
                        "listingType": lt.value if lt else None,
                        "default": fee_service.rates.is_default(listing_type)})
    except Exception as e:
        return jsonify({"success": False, "error": str(e)}), 500


@app.get("/api/volume-tier")
def get_volume_tier():
    try:
        tier = fee_service.tier_for(request.args.get("monthlyVolume"))
        return jsonify({"success": True, "data": tier.to_dict()})
    except Exception as e:
        return jsonify({"success": False, "error": str(e)}), 500


@app.get("/api/volume-tiers")
def get_volume_tiers():
    return jsonify({"success": True, "data": fee_service.volume_tiers()})


@app.get("/api/promotions")
def get_promotions():
    return jsonify({"success": True, "data": fee_service.promotion_prices()})


# ---- Calculation ----
@app.post("/api/calculate")
def calculate_fee():
    try:
        params = _body()
        sale_amount = params.get("saleAmount", 0)
        listing_type = params.get("listingType", ListingType.BUY_IT_NOW.value)
        promotion_fee = _optional(params.get("promotionFee")) or 0
        rate_override = _optional(params.get("rateOverride"))
        monthly_volume = _optional(params.get("monthlyVolume"))

        if rate_override is None and monthly_volume is not None:
            result = fee_service.compute_fee_for_volume(sale_amount, listing_type, monthly_volume, promotion_fee)
        else:
            result = fee_service.compute_fee(sale_amount, listing_type, rate_override, promotion_fee)
        return jsonify({"success": True, "data": result.to_dict()})
    except Exception as e:
        return jsonify({"success": False, "error": str(e)}), 500


@app.get("/api/fee-examples")
def get_fee_examples():
    try:
        raw = request.args.get("amounts")
        amounts = [a for a in raw.split(",") if a.strip()] if raw else None
        data = [ex.to_dict() for ex in fee_service.fee_examples(amounts)]
        return jsonify({"success": True, "data": data, "count": len(data)})
    except Exception as e:
        return jsonify({"success": False, "error": str(e)}), 500


@app.post("/api/earnings/summary")
def earnings_summary():
    try:
        rows = _body().get("earnings") or []
        if not isinstance(rows, list):
            return jsonify({"success": False, "error": "earnings must be a list"}), 400
        return jsonify({"success": True, "data": fee_service.summarize_earnings(rows).to_dict()})
    except Exception as e:
        return jsonify({"success": False, "error": str(e)}), 500


@app.post("/api/payouts")
def create_payout():
    try:
        params = _body()
        rows = params.get("earnings") or []
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            return jsonify({"success": False, "error": "earnings must be a list of objects"}), 400
        payout, updated = fee_service.request_payout(
            rows,
            seller_id=_optional(params.get("sellerId")),
            payout_method=params.get("payoutMethod") or "bank_transfer",
            payout_details=params.get("payoutDetails"),
        )
        return jsonify({"success": True, "data": {"payout": payout.to_dict(), "earnings": updated}})
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except Exception as e:
        return jsonify({"success": False, "error": str(e)}), 500


# ==================== MAIN ====================
if __name__ == "__main__":
    setup_logging()
    app.run(debug=False, host=config.HOST, port=config.PORT)
