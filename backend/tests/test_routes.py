from __future__ import annotations

from fastapi.testclient import TestClient

from app.core.config import settings

from factories import DOCUMENT_ID, DRIVE_ID, add_file_op, base_tx, cash_asset, group_tx, op, portfolio_state


def _url(listener_id: str | None = None) -> str:
    return f"/listeners/{listener_id or settings.rwa_listener_id}/strands"


def _drive(*operations) -> dict:
    return {"driveId": DRIVE_ID, "documentId": "", "operations": list(operations), "state": {"id": DRIVE_ID}}


def _document(*operations, state: dict | None = None) -> dict:
    return {"driveId": DRIVE_ID, "documentId": DOCUMENT_ID, "operations": list(operations), "state": state or {}}


def test_transmit_strands_projects_portfolio(client: TestClient):
    r = client.post(_url(), json={"strands": [_drive(add_file_op(DOCUMENT_ID, index=0))]})
    assert r.status_code == 200, r.text
    assert r.json() == {"applied": 1, "skipped": 0}

    r = client.post(
        _url(),
        json={
            "strands": [
                _document(
                    op("CREATE_SPV", 1, {"id": "spv-1", "name": "SPV"}),
                    op("CREATE_CASH_ASSET", 2, cash_asset()),
                    op(
                        "CREATE_PRINCIPAL_DRAW_GROUP_TRANSACTION",
                        3,
                        group_tx("g1", "PrincipalDraw", cash=base_tx("c1"), fees=[base_tx("f1", amount=5)]),
                    ),
                ),
                {**_document(op("CREATE_SPV", 1, {"id": "x"})), "documentId": "not-tracked"},
            ]
        },
    )
    assert r.status_code == 200, r.text
    assert r.json() == {"applied": 1, "skipped": 1}

    listed = client.get(f"/drives/{DRIVE_ID}/portfolios")
    assert listed.status_code == 200
    assert [p["document_id"] for p in listed.json()] == [DOCUMENT_ID]

    detail = client.get(f"/drives/{DRIVE_ID}/portfolios/{DOCUMENT_ID}")
    assert detail.status_code == 200
    body = detail.json()
    assert [s["id"] for s in body["spvs"]] == ["spv-1"]
    assert body["assets"][0]["asset_type"] == "Cash"
    (group,) = body["transactions"]
    assert group["type"] == "PrincipalDraw"
    assert group["cash_transaction"]["id"] == "c1"
    assert [fee["id"] for fee in group["fee_transactions"]] == ["f1"]


def test_rebuild_via_api(client: TestClient):
    client.post(_url(), json={"strands": [_drive(add_file_op(DOCUMENT_ID, index=0))]})

    state = portfolio_state(accounts=[{"id": "acc-1", "label": "Main"}], principalLenderAccountId="acc-1")
    r = client.post(_url(), json={"strands": [_document(op("CREATE_ACCOUNT", 0, {"id": "ignored"}), state=state)]})
    assert r.status_code == 200

    body = client.get(f"/drives/{DRIVE_ID}/portfolios/{DOCUMENT_ID}").json()
    assert body["principal_lender_account_id"] == "acc-1"
    assert [a["id"] for a in body["accounts"]] == ["acc-1"]


def test_unknown_listener_is_404(client: TestClient):
    r = client.post(_url("someone-else"), json={"strands": []})
    assert r.status_code == 404


def test_missing_target_is_409_and_rolled_back(client: TestClient):
    client.post(_url(), json={"strands": [_drive(add_file_op(DOCUMENT_ID, index=0))]})

    r = client.post(
        _url(),
        json={"strands": [_document(op("CREATE_SPV", 1, {"id": "spv-1"}), op("DELETE_SPV", 2, {"id": "ghost"}))]},
    )
    assert r.status_code == 409

    body = client.get(f"/drives/{DRIVE_ID}/portfolios/{DOCUMENT_ID}").json()
    assert body["spvs"] == []


def test_invalid_drive_input_is_422(client: TestClient):
    r = client.post(_url(), json={"strands": [_drive(op("DELETE_NODE", 1, {}))]})
    assert r.status_code == 422


def test_malformed_batch_is_rejected(client: TestClient):
    r = client.post(_url(), json={"strands": [{"documentId": DOCUMENT_ID}]})
    assert r.status_code == 422


def test_unknown_portfolio_is_404(client: TestClient):
    r = client.get(f"/drives/{DRIVE_ID}/portfolios/missing")
    assert r.status_code == 404
