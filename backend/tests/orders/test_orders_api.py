import uuid

import pytest
from httpx import AsyncClient

API_PREFIX = "/api/v1"


def pending_payload(garment_id, print_config, **overrides) -> dict:
    payload = {
        "customer_name": "Jane Doe",
        "email": "jane@acme-club.org",
        "organization_name": "Acme Running Club",
        "garment_id": str(garment_id),
        "color_size_quantities": {"Black": {"M": 10, "L": 20}},
        "print_config": print_config,
        "payment_intent_id": "pi_3Nabc",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_pending_order_to_order_flow(test_client: AsyncClient, test_garment, front_two_colors):
    response = await test_client.post(f"{API_PREFIX}/pending-orders", json=pending_payload(test_garment.id, front_two_colors))
    assert response.status_code == 201, response.text
    pending = response.json()

    response = await test_client.get(f"{API_PREFIX}/pending-orders/{pending['id']}")
    assert response.status_code == 200
    assert response.json()["customer_name"] == "Jane Doe"

    response = await test_client.post(f"{API_PREFIX}/orders/from-pending", json={
        "pending_order_id": pending["id"],
        "payment_intent_id": "pi_3Nabc",
    })
    assert response.status_code == 201, response.text
    order = response.json()
    assert order["status"] == "pending_art_review"
    assert order["total_quantity"] == 30
    assert isinstance(order["total_cost"], float)
    assert order["total_cost"] == 590.00
    assert order["deposit_amount"] == 295.00
    assert order["balance_due"] == 295.00
    assert order["pricing_breakdown"]["kind"] == "single"

    response = await test_client.get(f"{API_PREFIX}/pending-orders/{pending['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_order_creation_is_idempotent(test_client: AsyncClient, test_garment, front_two_colors):
    pending = (await test_client.post(
        f"{API_PREFIX}/pending-orders", json=pending_payload(test_garment.id, front_two_colors)
    )).json()
    body = {"pending_order_id": pending["id"], "payment_intent_id": "pi_3Nabc"}

    first = await test_client.post(f"{API_PREFIX}/orders/from-pending", json=body)
    second = await test_client.post(f"{API_PREFIX}/orders/from-pending", json=body)

    assert first.status_code == 201
    assert second.status_code == 200
    assert first.json()["id"] == second.json()["id"]

    by_intent = await test_client.get(f"{API_PREFIX}/orders/by-payment-intent/pi_3Nabc")
    assert by_intent.status_code == 200
    assert by_intent.json()["id"] == first.json()["id"]

    by_id = await test_client.get(f"{API_PREFIX}/orders/{first.json()['id']}")
    assert by_id.status_code == 200


@pytest.mark.asyncio
async def test_order_from_unknown_pending_returns_404(test_client: AsyncClient, pricing_tiers):
    response = await test_client.post(f"{API_PREFIX}/orders/from-pending", json={"pending_order_id": str(uuid.uuid4())})
    assert response.status_code == 404
    assert response.json()["detail"]["reason"] == "pending_order_not_found"


@pytest.mark.asyncio
async def test_pending_order_with_discount_code(test_client: AsyncClient, test_garment, front_two_colors):
    created = await test_client.post(f"{API_PREFIX}/discount-codes", json={
        "code": "club50", "discount_type": "fixed", "discount_value": "50.00",
    })
    assert created.status_code == 201

    response = await test_client.post(
        f"{API_PREFIX}/pending-orders",
        json=pending_payload(test_garment.id, front_two_colors, discount_code="CLUB50"),
    )
    assert response.status_code == 201
    pending = response.json()
    assert pending["discount_amount"] == 50.00

    order = (await test_client.post(f"{API_PREFIX}/orders/from-pending", json={
        "pending_order_id": pending["id"], "payment_intent_id": "pi_3Nabc",
    })).json()
    assert order["total_cost"] == 540.00
    assert order["discount_code"] == "CLUB50"


@pytest.mark.asyncio
async def test_pending_order_with_invalid_discount_code(test_client: AsyncClient, test_garment, front_two_colors):
    response = await test_client.post(
        f"{API_PREFIX}/pending-orders",
        json=pending_payload(test_garment.id, front_two_colors, discount_code="NOPE"),
    )
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "invalid_discount_code"


@pytest.mark.asyncio
async def test_pending_order_requires_garments(test_client: AsyncClient, test_garment, front_two_colors):
    payload = pending_payload(test_garment.id, front_two_colors)
    del payload["color_size_quantities"]
    response = await test_client.post(f"{API_PREFIX}/pending-orders", json=payload)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request data"


@pytest.mark.asyncio
async def test_delete_pending_order(test_client: AsyncClient, test_garment, front_two_colors):
    pending = (await test_client.post(
        f"{API_PREFIX}/pending-orders", json=pending_payload(test_garment.id, front_two_colors)
    )).json()

    assert (await test_client.delete(f"{API_PREFIX}/pending-orders/{pending['id']}")).status_code == 204
    assert (await test_client.delete(f"{API_PREFIX}/pending-orders/{pending['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_unknown_order_returns_404(test_client: AsyncClient):
    assert (await test_client.get(f"{API_PREFIX}/orders/{uuid.uuid4()}")).status_code == 404
    assert (await test_client.get(f"{API_PREFIX}/orders/by-payment-intent/pi_missing")).status_code == 404


@pytest.mark.asyncio
async def test_update_order_status(test_client: AsyncClient, test_garment, front_two_colors):
    pending = (await test_client.post(
        f"{API_PREFIX}/pending-orders", json=pending_payload(test_garment.id, front_two_colors)
    )).json()
    order = (await test_client.post(f"{API_PREFIX}/orders/from-pending", json={
        "pending_order_id": pending["id"], "payment_intent_id": "pi_3Nabc",
    })).json()

    response = await test_client.patch(f"{API_PREFIX}/orders/{order['id']}/status", json={"status": "in_production"})
    assert response.status_code == 200
    assert response.json()["status"] == "in_production"

    response = await test_client.patch(f"{API_PREFIX}/orders/{order['id']}/status", json={"status": "lost"})
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "invalid_order_status"


@pytest.mark.asyncio
async def test_list_orders_paginates_with_total_header(test_client: AsyncClient, test_garment, front_two_colors):
    for index in range(3):
        pending = (await test_client.post(
            f"{API_PREFIX}/pending-orders",
            json=pending_payload(test_garment.id, front_two_colors, payment_intent_id=f"pi_list_{index}"),
        )).json()
        response = await test_client.post(f"{API_PREFIX}/orders/from-pending", json={
            "pending_order_id": pending["id"], "payment_intent_id": f"pi_list_{index}",
        })
        assert response.status_code == 201, response.text

    response = await test_client.get(f"{API_PREFIX}/orders", params={"limit": 2})
    assert response.status_code == 200
    assert response.headers["X-Total-Count"] == "3"
    assert len(response.json()) == 2
    assert isinstance(response.json()[0]["total_cost"], (int, float))

    response = await test_client.get(f"{API_PREFIX}/orders", params={"status": "completed"})
    assert response.status_code == 200
    assert response.headers["X-Total-Count"] == "0"
    assert response.json() == []

    response = await test_client.get(f"{API_PREFIX}/orders", params={"status": "lost"})
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "invalid_order_status"
