from datetime import timedelta

import pytest
from httpx import AsyncClient

from screenprint.core.clock import utc_now

API_PREFIX = "/api/v1"


def campaign_payload(garment_id, print_config, **overrides) -> dict:
    payload = {
        "name": "Acme Running Club",
        "deadline": (utc_now() + timedelta(days=7)).isoformat(),
        "payment_style": "everyone_pays",
        "print_config": print_config,
        "garments": {str(garment_id): {"colors": ["Black"]}},
        "organizer_name": "Coach",
        "organizer_email": "coach@acme-club.org",
    }
    payload.update(overrides)
    return payload


async def create_campaign(client: AsyncClient, garment_id, print_config, **overrides) -> dict:
    response = await client.post(f"{API_PREFIX}/campaigns", json=campaign_payload(garment_id, print_config, **overrides))
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_campaign_lifecycle(test_client: AsyncClient, test_garment, front_two_colors):
    campaign = await create_campaign(test_client, test_garment.id, front_two_colors)
    slug = campaign["slug"]
    price = campaign["garment_configs"][str(test_garment.id)]["price"]
    assert isinstance(price, (int, float))
    assert price == 18

    response = await test_client.get(f"{API_PREFIX}/campaigns/{slug}")
    assert response.status_code == 200
    assert response.json()["status"] == "active"

    response = await test_client.post(f"{API_PREFIX}/campaigns/{slug}/orders", json={
        "participant_name": "Alex",
        "participant_email": "alex@acme-club.org",
        "items": [
            {"garment_id": str(test_garment.id), "size": "M", "color": "Black", "quantity": 10},
            {"garment_id": str(test_garment.id), "size": "L", "color": "Black", "quantity": 20},
        ],
    })
    assert response.status_code == 201, response.text
    checkout = response.json()
    assert checkout["requires_payment"] is True
    assert checkout["amount_due"] == 540
    assert isinstance(checkout["amount_due"], (int, float))

    for order in checkout["orders"]:
        response = await test_client.patch(
            f"{API_PREFIX}/campaigns/{slug}/orders/{order['id']}/status",
            json={"status": "paid", "payment_intent_id": f"pi_{order['size']}"},
        )
        assert response.status_code == 200, response.text
        assert response.json()["status"] == "paid"

    response = await test_client.get(f"{API_PREFIX}/campaigns/{slug}/stats")
    assert response.status_code == 200
    stats = response.json()
    assert stats["total_quantity"] == 30
    assert stats["size_breakdown"] == {"M": 10, "L": 20}
    assert stats["total_revenue"] == 540

    response = await test_client.post(f"{API_PREFIX}/campaigns/{slug}/settle", json={})
    assert response.status_code == 201, response.text
    settlement = response.json()
    assert settlement["campaign"]["status"] == "completed"
    assert settlement["order"]["total_cost"] == 540
    assert settlement["order"]["total_quantity"] == 30
    assert settlement["order"]["pricing_breakdown"]["kind"] == "campaign"
    assert settlement["settled_price_per_shirt"] <= price

    response = await test_client.post(f"{API_PREFIX}/campaigns/{slug}/settle", json={})
    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "invalid_campaign_status"

    response = await test_client.get(f"{API_PREFIX}/orders")
    assert response.status_code == 200
    assert response.headers["X-Total-Count"] == "1"
    assert response.json()[0]["id"] == settlement["order"]["id"]


@pytest.mark.asyncio
async def test_closed_campaign_rejects_orders(test_client: AsyncClient, test_garment, front_two_colors):
    campaign = await create_campaign(test_client, test_garment.id, front_two_colors)
    response = await test_client.post(f"{API_PREFIX}/campaigns/{campaign['slug']}/close")
    assert response.status_code == 200
    assert response.json()["status"] == "closed"

    response = await test_client.post(f"{API_PREFIX}/campaigns/{campaign['slug']}/orders", json={
        "participant_name": "Alex",
        "participant_email": "alex@acme-club.org",
        "items": [{"garment_id": str(test_garment.id), "size": "M", "color": "Black"}],
    })
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "campaign_not_accepting_orders"


@pytest.mark.asyncio
async def test_campaign_validation_errors(test_client: AsyncClient, test_garment, front_two_colors):
    past = (utc_now() - timedelta(days=1)).isoformat()
    response = await test_client.post(
        f"{API_PREFIX}/campaigns", json=campaign_payload(test_garment.id, front_two_colors, deadline=past)
    )
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "invalid_campaign"

    response = await test_client.get(f"{API_PREFIX}/campaigns/no-such-campaign")
    assert response.status_code == 404
    assert response.json()["detail"]["reason"] == "campaign_not_found"

    response = await test_client.get(f"{API_PREFIX}/campaigns", params={"status": "archived"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_campaigns_by_organizer(test_client: AsyncClient, test_garment, front_two_colors):
    await create_campaign(test_client, test_garment.id, front_two_colors)
    await create_campaign(test_client, test_garment.id, front_two_colors, organizer_email="other@club.org")

    response = await test_client.get(f"{API_PREFIX}/campaigns", params={"organizer_email": "coach@acme-club.org"})
    assert response.status_code == 200
    assert response.headers["X-Total-Count"] == "1"
    assert response.json()[0]["organizer_email"] == "coach@acme-club.org"
