from decimal import Decimal

import pytest

from jewelerp.core.config import settings
from jewelerp.services.organization_service import SystemAccount


@pytest.fixture
def org_id(client):
    response = client.post("/api/v1/organizations", json={"name": "Shree Jewellers", "state_code": "27"})
    assert response.status_code == 200
    return response.json()["id"]


def account_ids(client, org_id):
    response = client.get(f"/api/v1/organizations/{org_id}/accounting/accounts")
    assert response.status_code == 200
    return {a["account_code"]: a["id"] for a in response.json()}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_unknown_organization_is_404(client):
    assert client.get("/api/v1/organizations/9999").status_code == 404
    assert client.get("/api/v1/organizations/9999/accounting/accounts").status_code == 404


def test_post_entry_and_trial_balance(client, org_id):
    ids = account_ids(client, org_id)
    response = client.post(f"/api/v1/organizations/{org_id}/accounting/entries", json={
        "narration": "Owner capital",
        "lines": [
            {"account_id": ids[SystemAccount.CASH], "debit": "1000"},
            {"account_id": ids[SystemAccount.CAPITAL], "credit": "1000"},
        ],
    })
    assert response.status_code == 200
    entry = response.json()
    assert entry["status"] == "posted"
    assert len(entry["details"]) == 2

    report = client.get(f"/api/v1/organizations/{org_id}/accounting/reports/trial-balance").json()
    assert Decimal(report["total_debit"]) == Decimal("1000")
    assert Decimal(report["total_credit"]) == Decimal("1000")
    assert Decimal(report["difference"]) == 0
    cash_row = next(r for r in report["rows"] if r["account_code"] == SystemAccount.CASH)
    assert Decimal(cash_row["debit_total"]) == Decimal("1000")


def test_unbalanced_entry_is_400_and_writes_nothing(client, org_id):
    ids = account_ids(client, org_id)
    response = client.post(f"/api/v1/organizations/{org_id}/accounting/entries", json={
        "lines": [
            {"account_id": ids[SystemAccount.CASH], "debit": "500"},
            {"account_id": ids[SystemAccount.CAPITAL], "credit": "400"},
        ],
    })
    assert response.status_code == 400
    assert client.get(f"/api/v1/organizations/{org_id}/accounting/entries").json() == []


def test_sub_paise_amount_is_400(client, org_id):
    ids = account_ids(client, org_id)
    response = client.post(f"/api/v1/organizations/{org_id}/accounting/entries", json={
        "lines": [
            {"account_id": ids[SystemAccount.CASH], "debit": "10.555"},
            {"account_id": ids[SystemAccount.CAPITAL], "credit": "10.555"},
        ],
    })
    assert response.status_code == 400


def test_draft_then_post(client, org_id):
    ids = account_ids(client, org_id)
    base = f"/api/v1/organizations/{org_id}/accounting"
    draft = client.post(f"{base}/entries/drafts", json={
        "lines": [
            {"account_id": ids[SystemAccount.BANK], "debit": "75.50"},
            {"account_id": ids[SystemAccount.OTHER_INCOME], "credit": "75.50"},
        ],
    }).json()
    assert draft["status"] == "draft"

    pnl = client.get(f"{base}/reports/profit-loss").json()
    assert Decimal(pnl["revenue"]) == 0

    posted = client.post(f"{base}/entries/{draft['id']}/post")
    assert posted.status_code == 200
    assert client.post(f"{base}/entries/{draft['id']}/post").status_code == 400

    pnl = client.get(f"{base}/reports/profit-loss").json()
    assert Decimal(pnl["revenue"]) == Decimal("75.50")
    assert Decimal(pnl["profit"]) == Decimal("75.50")
    assert client.get(f"{base}/balances/verify").json() == []


def test_sale_flow_over_http(client, org_id):
    base = f"/api/v1/organizations/{org_id}"
    item = client.post(f"{base}/inventory/items", json={
        "sku": "CHAIN-18K", "name": "18K Chain", "retail_price": "25000", "gst_rate": "3",
        "opening_stock": "2",
    }).json()
    customer = client.post(f"{base}/crm/customers", json={"name": "Anil Mehta"}).json()

    response = client.post(f"{base}/sales", json={
        "customer_id": customer["id"],
        "payment_mode": "credit",
        "items": [{"item_id": item["id"], "quantity": "1"}],
    })
    assert response.status_code == 200
    sale = response.json()
    assert Decimal(sale["total_amount"]) == Decimal("25750")
    assert len(sale["items"]) == 1

    outstanding = client.get(f"{base}/crm/customers/outstanding").json()
    assert [c["id"] for c in outstanding] == [customer["id"]]
    assert Decimal(client.get(f"{base}/inventory/items/{item['id']}").json()["current_stock"]) == 1

    too_many = client.post(f"{base}/sales", json={"items": [{"item_id": item["id"], "quantity": "5"}]})
    assert too_many.status_code == 400


def test_reset_data_endpoint(client, org_id):
    ids = account_ids(client, org_id)
    base = f"/api/v1/organizations/{org_id}"
    client.post(f"{base}/accounting/entries", json={
        "lines": [
            {"account_id": ids[SystemAccount.CASH], "debit": "1000"},
            {"account_id": ids[SystemAccount.CAPITAL], "credit": "1000"},
        ],
    })

    response = client.post(f"{base}/settings/reset-data")
    assert response.status_code == 200
    body = response.json()
    assert body["deleted_rows"]["ledger_entries"] == 1
    assert body["deleted_rows"]["ledger_entry_details"] == 2
    assert client.get(f"{base}/accounting/entries").json() == []

    again = client.post(f"{base}/settings/reset-data").json()
    assert set(again["deleted_rows"].values()) == {0}


def test_factory_reset_can_be_disabled(client, org_id, monkeypatch):
    monkeypatch.setattr(settings, "ALLOW_FACTORY_RESET", False)
    response = client.post(f"/api/v1/organizations/{org_id}/settings/factory-reset")
    assert response.status_code == 403


def test_factory_reset_reseeds_chart(client, org_id):
    base = f"/api/v1/organizations/{org_id}"
    client.post(f"{base}/accounting/accounts", json={"account_name": "Locker Rent", "account_type": "expense"})

    response = client.post(f"{base}/settings/factory-reset")
    assert response.status_code == 200
    codes = set(account_ids(client, org_id))
    assert "ACC-00001" not in codes
    assert SystemAccount.CASH in codes


def test_trial_balance_excel_download(client, org_id):
    response = client.get(f"/api/v1/organizations/{org_id}/accounting/reports/trial-balance/excel")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/vnd.openxmlformats")
    assert "trial_balance_" in response.headers["content-disposition"]
    # xlsx files are zip archives
    assert response.content[:2] == b"PK"
