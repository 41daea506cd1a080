import pytest

import app as app_module
import config


@pytest.fixture
def client(service, settings_csv, tmp_path, monkeypatch):
    monkeypatch.setattr(app_module, "fee_service", service)
    monkeypatch.setattr(config, "COMMISSION_SETTINGS_CSV", settings_csv)
    monkeypatch.setattr(config, "BACKUP_DIR", tmp_path / "backup")
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] is True
    assert body["data"]["source"] == "csv"


def test_commission_settings(client):
    data = client.get("/api/commission-settings").get_json()["data"]
    assert [d["listingType"] for d in data] == ["buy_it_now", "make_offer"]
    assert data[0]["label"] == "Buy It Now"


def test_commission_rate_known_and_unknown(client):
    body = client.get("/api/commission-rate?listingType=make_offer").get_json()
    assert body["data"] == 4.0
    assert body["default"] is False

    body = client.get("/api/commission-rate?listingType=auction").get_json()
    assert body["data"] == 5.0
    assert body["listingType"] is None
    assert body["default"] is True


def test_volume_tier(client):
    body = client.get("/api/volume-tier?monthlyVolume=1000").get_json()
    assert body["data"] == {"tier": "Silver", "minimumMonthlyVolume": 1000.0, "rate": 4.5}
    body = client.get("/api/volume-tier?monthlyVolume=-20").get_json()
    assert body["data"]["tier"] == "Standard"


def test_volume_tiers(client):
    data = client.get("/api/volume-tiers").get_json()["data"]
    assert [t["tier"] for t in data] == ["Standard", "Silver", "Gold", "Diamond"]


def test_calculate_basic(client):
    res = client.post("/api/calculate", json={"saleAmount": 100, "listingType": "buy_it_now"})
    data = res.get_json()["data"]
    assert data["commissionAmount"] == 5.0
    assert data["netEarnings"] == 95.0
    assert data["tier"] is None


def test_calculate_with_volume(client):
    res = client.post("/api/calculate", json={"saleAmount": "250", "monthlyVolume": 3000})
    data = res.get_json()["data"]
    assert data["tier"] == "Gold"
    assert data["commissionAmount"] == 10.0
    assert data["netEarnings"] == 240.0


def test_calculate_override_beats_volume(client):
    res = client.post("/api/calculate", json={"saleAmount": 200, "monthlyVolume": 6000, "rateOverride": 2})
    data = res.get_json()["data"]
    assert data["commissionRate"] == 2.0
    assert data["commissionAmount"] == 4.0


def test_calculate_malformed_input_is_zero(client):
    res = client.post("/api/calculate", json={"saleAmount": "lots", "listingType": "??"})
    assert res.status_code == 200
    data = res.get_json()["data"]
    assert data["commissionAmount"] == 0.0
    assert data["netEarnings"] == 0.0
    assert data["commissionRate"] == 5.0


def test_calculate_without_body(client):
    res = client.post("/api/calculate")
    assert res.status_code == 200
    assert res.get_json()["data"]["saleAmount"] == 0.0


def test_fee_examples(client):
    body = client.get("/api/fee-examples").get_json()
    assert body["count"] == 15
    body = client.get("/api/fee-examples?amounts=10,20").get_json()
    assert body["count"] == 6


def test_promotions(client):
    data = client.get("/api/promotions").get_json()["data"]
    assert data["featured_listing"] == 3.49
    assert data["homepage_spotlight"] == 9.99


def test_earnings_summary(client):
    rows = [{"sale_amount": 100, "commission_amount": 5, "net_earnings": 95, "status": "available"}]
    data = client.post("/api/earnings/summary", json={"earnings": rows}).get_json()["data"]
    assert data["available_earnings"] == 95.0

    res = client.post("/api/earnings/summary", json={"earnings": "nope"})
    assert res.status_code == 400


def test_admin_update_setting(client):
    res = client.post("/api/admin/commission-settings",
                      json={"listingType": "make_offer", "commissionRate": 3.25})
    assert res.status_code == 200
    assert res.get_json()["data"]["commissionRate"] == 3.25

    body = client.get("/api/commission-rate?listingType=make_offer").get_json()
    assert body["data"] == 3.25


def test_admin_update_rejects_bad_input(client):
    res = client.post("/api/admin/commission-settings", json={"listingType": "make_offer", "commissionRate": 250})
    assert res.status_code == 400
    assert res.get_json()["success"] is False

    res = client.post("/api/admin/commission-settings", json={})
    assert res.status_code == 400


def test_manual_reload(client):
    body = client.post("/api/reload").get_json()
    assert body["success"] is True
    assert body["reloaded"] is True


@pytest.mark.parametrize("flag", ["false", "0", "no", False])
def test_admin_deactivate_with_string_flag(client, flag):
    res = client.post("/api/admin/commission-settings", json={"listingType": "make_offer", "isActive": flag})
    assert res.status_code == 200
    assert res.get_json()["data"]["isActive"] is False

    body = client.get("/api/commission-rate?listingType=make_offer").get_json()
    assert body["default"] is True
    assert body["data"] == 5.0


def test_calculate_very_large_amount(client):
    res = client.post("/api/calculate", json={"saleAmount": "1e30", "listingType": "buy_it_now"})
    assert res.status_code == 200
    data = res.get_json()["data"]
    assert data["commissionAmount"] == 5e28
    assert data["netEarnings"] == 9.5e29


def test_payout(client):
    rows = [
        {"seller_id": "s1", "sale_amount": 100, "commission_amount": 5, "net_earnings": 95, "status": "available"},
        {"seller_id": "s1", "sale_amount": 50, "commission_amount": 2.5, "net_earnings": 47.5, "status": "pending"},
    ]
    res = client.post("/api/payouts", json={"earnings": rows, "sellerId": "s1", "payoutMethod": "paypal"})
    assert res.status_code == 200
    data = res.get_json()["data"]
    assert data["payout"]["final_payout_amount"] == 95.0
    assert data["payout"]["payout_method"] == "paypal"
    assert [r["status"] for r in data["earnings"]] == ["paid_out", "pending"]


def test_payout_with_nothing_available(client):
    rows = [{"seller_id": "s1", "net_earnings": 10, "status": "paid_out"}]
    res = client.post("/api/payouts", json={"earnings": rows, "sellerId": "s1"})
    assert res.status_code == 400
    assert res.get_json()["success"] is False

    res = client.post("/api/payouts", json={"earnings": ["x"]})
    assert res.status_code == 400
