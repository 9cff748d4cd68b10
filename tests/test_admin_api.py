from conftest import APPLICATION, DOCUMENT_TYPES, PDF, VEHICLE, auth


def _submitted_driver(client, user_id="user-1"):
    h = auth(user_id)
    driver_id = client.post("/api/driver/apply", json=APPLICATION, headers=h).json()["data"]["id"]
    for t in DOCUMENT_TYPES:
        client.post(
            f"/api/driver/{driver_id}/documents",
            data={"type": t},
            files={"document": (f"{t}.pdf", PDF, "application/pdf")},
            headers=h,
        )
    client.post(f"/api/driver/{driver_id}/vehicle", json=VEHICLE, headers=h)
    assert client.post(f"/api/driver/{driver_id}/submit", headers=h).status_code == 200
    return driver_id


def test_admin_surface_requires_admin(client):
    driver_id = _submitted_driver(client)
    r = client.post(f"/api/admin/drivers/{driver_id}/verify", headers=auth("user-1"))
    assert r.status_code == 403
    r = client.get("/api/admin/drivers/pending")
    assert r.status_code == 401


def test_admin_role_claim_is_enough(client):
    r = client.get("/api/admin/drivers/pending", headers=auth("ops-9", role="admin"))
    assert r.status_code == 200
    assert r.json()["data"] == []


def test_verify_flow(client, admin_headers):
    driver_id = _submitted_driver(client)

    pending = client.get("/api/admin/drivers/pending", headers=admin_headers).json()["data"]
    assert [p["id"] for p in pending] == [driver_id]
    assert len(pending[0]["documents"]) == 4

    r = client.post(f"/api/admin/drivers/{driver_id}/verify", json={"notes": "ok"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "verified"

    view = client.get(f"/api/driver/{driver_id}/registration-status", headers=auth()).json()["data"]
    assert view["is_complete"] is True

    r = client.put(f"/api/driver/{driver_id}/availability", json={"is_available": True}, headers=auth())
    assert r.status_code == 200
    assert r.json()["data"]["is_available"] is True

    r = client.post(f"/api/admin/drivers/{driver_id}/verify", headers=admin_headers)
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "INVALID_STATE"


def test_verify_before_submit_is_409(client, admin_headers):
    h = auth()
    driver_id = client.post("/api/driver/apply", json=APPLICATION, headers=h).json()["data"]["id"]
    r = client.post(f"/api/admin/drivers/{driver_id}/verify", headers=admin_headers)
    assert r.status_code == 409


def test_verify_unknown_driver_is_404(client, admin_headers):
    r = client.post("/api/admin/drivers/31337/verify", headers=admin_headers)
    assert r.status_code == 404


def test_soft_reject_and_resubmit(client, admin_headers):
    driver_id = _submitted_driver(client)
    r = client.post(
        f"/api/admin/drivers/{driver_id}/reject",
        json={"reason": "insurance expired", "document_types": ["insurance"]},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "pending_verification"

    view = client.get(f"/api/driver/{driver_id}/registration-status", headers=auth()).json()["data"]
    assert view["missing_items"] == ["insurance"]
    assert view["rejection_reason"] == "insurance expired"

    r = client.post(f"/api/driver/{driver_id}/submit", headers=auth())
    assert r.status_code == 409
    assert r.json()["error"]["missing_items"] == ["insurance"]

    client.post(
        f"/api/driver/{driver_id}/documents",
        data={"type": "insurance"},
        files={"document": ("insurance.pdf", PDF, "application/pdf")},
        headers=auth(),
    )
    assert client.post(f"/api/driver/{driver_id}/submit", headers=auth()).status_code == 200
    view = client.get(f"/api/driver/{driver_id}/registration-status", headers=auth()).json()["data"]
    assert view["next_step"] == "verification"


def test_hard_reject(client, admin_headers):
    driver_id = _submitted_driver(client)
    r = client.post(
        f"/api/admin/drivers/{driver_id}/reject",
        json={"reason": "forged licence", "hard": True},
        headers=admin_headers,
    )
    assert r.json()["data"]["status"] == "deactivated"

    r = client.post(f"/api/driver/{driver_id}/submit", headers=auth())
    assert r.status_code == 409


def test_reject_needs_reason(client, admin_headers):
    driver_id = _submitted_driver(client)
    r = client.post(f"/api/admin/drivers/{driver_id}/reject", json={}, headers=admin_headers)
    assert r.status_code == 400


def test_deactivate_and_document_review(client, admin_headers):
    h = auth()
    driver_id = client.post("/api/driver/apply", json=APPLICATION, headers=h).json()["data"]["id"]
    doc = client.post(
        f"/api/driver/{driver_id}/documents",
        data={"type": "license"},
        files={"document": ("license.pdf", PDF, "application/pdf")},
        headers=h,
    ).json()["data"]

    r = client.post(f"/api/admin/drivers/{driver_id}/documents/{doc['id']}/verify", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["data"]["verified"] is True

    r = client.post(f"/api/admin/drivers/{driver_id}/deactivate", json={"reason": "duplicate"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "deactivated"

    view = client.get(f"/api/driver/{driver_id}/registration-status", headers=h).json()["data"]
    assert view["status"] == "deactivated"
    assert view["next_step"] is None

    r = client.post(f"/api/admin/drivers/{driver_id}/deactivate", headers=admin_headers)
    assert r.status_code == 409
