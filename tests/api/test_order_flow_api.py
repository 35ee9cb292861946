from decimal import Decimal


def _data(response, status=200):
    assert response.status_code == status, response.text
    body = response.json()
    assert body["success"] is True
    return body["data"]


def _submit_and_approve(client, auth, order_id, stage):
    milestone = _data(
        client.post(f"/orders/{order_id}/milestones", json={"milestone": stage}, headers=auth["tailor"]),
        201,
    )
    return _data(
        client.post(f"/milestones/{milestone['id']}/review", json={"action": "APPROVED"}, headers=auth["customer"])
    )


def test_health(client):
    assert client.get("/").json()["status"] == "ok"


def test_me(client, auth):
    me = _data(client.get("/users/me", headers=auth["tailor"]))
    assert me["role"] == "tailor"


def test_auth_required(client):
    assert client.get("/orders/", headers={"Authorization": "Bearer not-a-token"}).status_code == 401
    assert client.get("/orders/", headers={"Authorization": "Token abc"}).status_code == 401


def test_pricing_quote(client, auth):
    pricing = _data(
        client.post(
            "/orders/pricing",
            json={"garment_type": "kente-shirt", "fabric_choice": "TAILOR_SOURCED"},
            headers=auth["customer"],
        )
    )
    assert Decimal(pricing["total_amount"]) == Decimal("130.00")
    assert Decimal(pricing["deposit_amount"]) == Decimal("32.50")

    bad = client.post("/orders/pricing", json={"garment_type": "spacesuit"}, headers=auth["customer"])
    assert bad.status_code == 400
    assert bad.json()["error_code"] == "GARMENT_TYPE_INVALID"


def test_tailor_cannot_place_orders(client, auth, user_ids):
    response = client.post(
        "/orders/",
        json={"tailor_id": user_ids["tailor"], "garment_type": "dashiki"},
        headers=auth["tailor"],
    )
    assert response.status_code == 403
    assert response.json()["error_code"] == "PERMISSION_DENIED"


def test_full_order_flow(client, auth, user_ids):
    order = _data(
        client.post(
            "/orders/",
            json={
                "tailor_id": user_ids["tailor"],
                "garment_type": "kente-shirt",
                "fabric_choice": "TAILOR_SOURCED",
            },
            headers=auth["customer"],
        ),
        201,
    )
    order_id = order["id"]
    assert order["status"] == "PENDING_DEPOSIT"

    # strangers cannot see it
    assert client.get(f"/orders/{order_id}", headers=auth["other_customer"]).status_code == 403

    mismatch = client.post(f"/escrow/orders/{order_id}/deposit", json={"amount": "30.00"}, headers=auth["customer"])
    assert mismatch.status_code == 400
    assert mismatch.json()["error_code"] == "ESCROW_AMOUNT_MISMATCH"

    escrow = _data(
        client.post(f"/escrow/orders/{order_id}/deposit", json={"amount": "32.50"}, headers=auth["customer"])
    )
    assert escrow["stage"] == "FITTING"

    fabric = _submit_and_approve(client, auth, order_id, "FABRIC_SELECTED")
    assert fabric["progress_percentage"] == 10
    assert fabric["order_status"] == "IN_PRODUCTION"
    assert fabric["payment_triggered"] is False

    fitting = _submit_and_approve(client, auth, order_id, "FITTING_READY")
    assert fitting["payment_triggered"] is True

    final = _submit_and_approve(client, auth, order_id, "READY_FOR_DELIVERY")
    assert final["payment_triggered"] is True
    assert final["order_status"] == "READY_FOR_DELIVERY"

    escrow = _data(client.get(f"/escrow/orders/{order_id}", headers=auth["tailor"]))
    assert escrow["stage"] == "RELEASED"
    assert Decimal(escrow["escrow_balance"]) == Decimal("0")
    assert [t["transaction_type"] for t in escrow["transactions"]] == ["DEPOSIT", "FITTING_PAYMENT", "FINAL_PAYMENT"]

    progress = _data(client.get(f"/orders/{order_id}/progress", headers=auth["customer"]))
    assert progress["progress"]["progress_percentage"] == 100
    assert progress["progress"]["completed_milestones"] == 3

    delivered = _data(client.post(f"/orders/{order_id}/confirm-delivery", headers=auth["customer"]))
    assert delivered["status"] == "DELIVERED"

    account = _data(client.get("/loyalty/account", headers=auth["customer"]))
    assert account["available_points"] == 130
    assert account["tier"] == "BRONZE"

    review = _data(
        client.post(
            "/reviews/",
            json={"order_id": order_id, "rating": 5, "review_text": "Perfect fit"},
            headers=auth["customer"],
        ),
        201,
    )
    assert review["moderation_status"] == "APPROVED"

    summary = _data(client.get(f"/reviews/tailors/{user_ids['tailor']}/summary", headers=auth["other_customer"]))
    assert summary["total_reviews"] == 1

    check = _data(client.get(f"/escrow/orders/{order_id}/validate", headers=auth["admin"]))
    assert check["is_valid"] is True

    pdf = client.get(f"/escrow/orders/{order_id}/statement.pdf", headers=auth["customer"])
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")

    activities = _data(client.get("/activities/", params={"code": "RELEASE_PAYMENT"}, headers=auth["admin"]))
    assert activities["total"] == 2


def test_rejection_requires_comment(client, auth, user_ids):
    order = _data(
        client.post("/orders/", json={"tailor_id": user_ids["tailor"], "garment_type": "dashiki"}, headers=auth["customer"]),
        201,
    )
    _data(client.post(f"/escrow/orders/{order['id']}/deposit", json={"amount": "15.00"}, headers=auth["customer"]))
    milestone = _data(
        client.post(f"/orders/{order['id']}/milestones", json={"milestone": "FABRIC_SELECTED"}, headers=auth["tailor"]),
        201,
    )

    response = client.post(f"/milestones/{milestone['id']}/review", json={"action": "REJECTED"}, headers=auth["customer"])
    assert response.status_code == 422

    rejected = _data(
        client.post(
            f"/milestones/{milestone['id']}/review",
            json={"action": "REJECTED", "comment": "Stitching is uneven"},
            headers=auth["customer"],
        )
    )
    assert rejected["milestone"]["approval_status"] == "REJECTED"

    history = _data(client.get(f"/milestones/{milestone['id']}/approvals", headers=auth["tailor"]))
    assert history[0]["comment"] == "Stitching is uneven"


def test_cancel_refunds_deposit(client, auth, user_ids):
    order = _data(
        client.post("/orders/", json={"tailor_id": user_ids["tailor"], "garment_type": "dashiki"}, headers=auth["customer"]),
        201,
    )
    _data(client.post(f"/escrow/orders/{order['id']}/deposit", json={"amount": "15.00"}, headers=auth["customer"]))

    cancelled = _data(client.post(f"/orders/{order['id']}/cancel", json={"reason": "Travelling"}, headers=auth["customer"]))
    assert cancelled["status"] == "CANCELLED"
    assert cancelled["escrow_stage"] == "REFUNDED"

    listing = _data(client.get("/orders/", params={"status": "CANCELLED"}, headers=auth["customer"]))
    assert listing["total"] == 1


def test_dispute_holds_and_resumes_order(client, auth, user_ids):
    order = _data(
        client.post(
            "/orders/",
            json={"tailor_id": user_ids["tailor"], "garment_type": "dashiki"},
            headers=auth["customer"],
        ),
        201,
    )
    order_id = order["id"]
    _data(client.post(f"/escrow/orders/{order_id}/deposit", json={"amount": "15.00"}, headers=auth["customer"]))

    milestone = _data(
        client.post(f"/orders/{order_id}/milestones", json={"milestone": "FABRIC_SELECTED"}, headers=auth["tailor"]),
        201,
    )

    short = client.post("/disputes/", json={"milestone_id": milestone["id"], "reason": "bad"}, headers=auth["customer"])
    assert short.status_code == 422

    dispute = _data(
        client.post(
            "/disputes/",
            json={"milestone_id": milestone["id"], "reason": "Fabric differs from the sample photo"},
            headers=auth["customer"],
        ),
        201,
    )
    assert _data(client.get(f"/orders/{order_id}", headers=auth["customer"]))["status"] == "DISPUTED"

    blocked = client.post(f"/milestones/{milestone['id']}/review", json={"action": "APPROVED"}, headers=auth["customer"])
    assert blocked.status_code == 409
    assert blocked.json()["error_code"] == "ORDER_INVALID_STATE"

    _data(client.post(f"/disputes/{dispute['id']}/messages", json={"body": "Reviewing photos"}, headers=auth["admin"]), 201)
    assert len(_data(client.get(f"/disputes/{dispute['id']}/messages", headers=auth["tailor"]))) == 1

    assert client.get(f"/disputes/{dispute['id']}", headers=auth["other_customer"]).status_code == 403
    assert [d["id"] for d in _data(client.get("/disputes/open", headers=auth["admin"]))] == [dispute["id"]]

    not_admin = client.post(
        f"/disputes/{dispute['id']}/resolve",
        json={"resolution_type": "ORDER_COMPLETION", "outcome": "Tailor will replace the fabric"},
        headers=auth["customer"],
    )
    assert not_admin.status_code == 403

    resolved = _data(
        client.post(
            f"/disputes/{dispute['id']}/resolve",
            json={"resolution_type": "ORDER_COMPLETION", "outcome": "Tailor will replace the fabric"},
            headers=auth["admin"],
        )
    )
    assert resolved["order_status"] == "DEPOSIT_PAID"
    assert resolved["dispute"]["status"] == "RESOLVED"

    review = _data(
        client.post(f"/milestones/{milestone['id']}/review", json={"action": "APPROVED"}, headers=auth["customer"])
    )
    assert review["order_status"] == "IN_PRODUCTION"
