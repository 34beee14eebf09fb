"""Tests for the order HTTP endpoints"""

import pytest
from httpx import AsyncClient
from uuid import uuid4

from app.api.auth import create_access_token


def order_payload(address, **overrides) -> dict:
    payload = {
        "address_id": str(address.id),
        "items": [
            {"product_id": "gin-tonic", "product_name": "Gin Tônica", "quantity": 2, "unit_price": "45.00"},
            {"product_id": "gelo", "product_name": "Gelo 5kg", "quantity": 1, "unit_price": "10.00"},
        ],
        "delivery_fee": "8.90",
        "payment_method": "pix",
    }
    payload.update(overrides)
    return payload


def as_user(client: AsyncClient, user) -> AsyncClient:
    client.headers["Authorization"] = f"Bearer {create_access_token(user)}"
    return client


async def create_order(client: AsyncClient, customer, address, **overrides) -> dict:
    as_user(client, customer)
    response = await client.post("/api/orders", json=order_payload(address, **overrides))
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_customer_creates_pending_order(customer_client: AsyncClient, test_customer, test_address, broadcaster):
    channel = broadcaster.subscribe()

    response = await customer_client.post("/api/orders", json=order_payload(test_address))

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["user_id"] == str(test_customer.id)
    assert float(data["total"]) == 108.90
    assert data["created_at"] is not None
    assert data["accepted_at"] is None

    await channel.receive()
    frame = await channel.receive()
    assert frame.startswith("event: order_created\n")
    assert data["id"] in frame


@pytest.mark.asyncio
async def test_customer_cannot_create_accepted_order(customer_client: AsyncClient, test_address):
    response = await customer_client.post("/api/orders", json=order_payload(test_address, status="accepted"))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_pdv_creates_accepted_counter_order(pdv_client: AsyncClient):
    response = await pdv_client.post(
        "/api/orders",
        json={
            "order_type": "counter",
            "status": "accepted",
            "items": [{"product_name": "Cerveja Lata", "quantity": 6, "unit_price": "5.50"}],
            "payment_method": "cash",
            "change_for": "50.00",
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "accepted"
    assert data["accepted_at"] is not None
    assert float(data["delivery_fee"]) == 0


@pytest.mark.asyncio
async def test_kitchen_cannot_create_accepted_order(kitchen_client: AsyncClient):
    response = await kitchen_client.post(
        "/api/orders",
        json={
            "order_type": "counter",
            "status": "accepted",
            "items": [{"product_name": "Água", "quantity": 1, "unit_price": "3.00"}],
            "payment_method": "pix",
        },
    )

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"items": []},
        {"change_for": "100.00"},
        {"address_id": None},
        {"status": "ready"},
        {"payment_method": "cheque"},
    ],
)
async def test_invalid_order_payloads(customer_client: AsyncClient, test_address, overrides):
    response = await customer_client.post("/api/orders", json=order_payload(test_address, **overrides))

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delivery_fee_priced_when_missing(customer_client: AsyncClient, test_address, test_store):
    payload = order_payload(test_address)
    del payload["delivery_fee"]

    response = await customer_client.post("/api/orders", json=payload)

    assert response.status_code == 201
    data = response.json()
    assert float(data["delivery_fee"]) == 5.0
    assert data["delivery_distance"] is not None


@pytest.mark.asyncio
async def test_status_flow_and_duplicate_accept(client: AsyncClient, test_customer, test_address, test_kitchen):
    order = await create_order(client, test_customer, test_address)
    as_user(client, test_kitchen)

    accepted = await client.patch(f"/api/orders/{order['id']}/status", json={"status": "accepted"})
    assert accepted.status_code == 200
    assert accepted.json()["accepted_at"] is not None

    duplicate = await client.patch(f"/api/orders/{order['id']}/status", json={"status": "accepted"})
    assert duplicate.status_code == 409
    detail = duplicate.json()["detail"]
    assert detail["error"] == "invalid_transition"
    assert detail["current_status"] == "accepted"
    assert detail["allowed"] == ["cancelled", "preparing"]

    unchanged = await client.get(f"/api/orders/{order['id']}")
    assert unchanged.json()["accepted_at"] == accepted.json()["accepted_at"]


@pytest.mark.asyncio
async def test_status_change_requires_staff(client: AsyncClient, test_customer, test_address):
    order = await create_order(client, test_customer, test_address)

    response = await client.patch(f"/api/orders/{order['id']}/status", json={"status": "cancelled"})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_unknown_order_is_404(kitchen_client: AsyncClient):
    response = await kitchen_client.patch(f"/api/orders/{uuid4()}/status", json={"status": "accepted"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_assign_flow(client: AsyncClient, test_customer, test_address, test_kitchen, test_motoboy, broadcaster):
    order = await create_order(client, test_customer, test_address)
    as_user(client, test_kitchen)

    early = await client.patch(f"/api/orders/{order['id']}/assign", json={"motoboy_id": str(test_motoboy.id)})
    assert early.status_code == 409

    for status in ["accepted", "preparing", "ready"]:
        response = await client.patch(f"/api/orders/{order['id']}/status", json={"status": status})
        assert response.status_code == 200

    channel = broadcaster.subscribe()
    response = await client.patch(f"/api/orders/{order['id']}/assign", json={"motoboyId": str(test_motoboy.id)})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "dispatched"
    assert data["motoboy_id"] == str(test_motoboy.id)

    await channel.receive()
    assert (await channel.receive()).startswith("event: order_status_changed")
    assert (await channel.receive()).startswith("event: order_assigned")

    queue = await client.get(f"/api/orders/motoboy/{test_motoboy.id}")
    assert [o["id"] for o in queue.json()] == [order["id"]]


@pytest.mark.asyncio
async def test_status_queue_listing(client: AsyncClient, test_customer, test_address, test_kitchen):
    first = await create_order(client, test_customer, test_address)
    await create_order(client, test_customer, test_address)
    as_user(client, test_kitchen)
    await client.patch(f"/api/orders/{first['id']}/status", json={"status": "accepted"})

    pending = await client.get("/api/orders/status/pending")
    accepted = await client.get("/api/orders/status/accepted")

    assert len(pending.json()) == 1
    assert [o["id"] for o in accepted.json()] == [first["id"]]

    everything = await client.get("/api/orders")
    assert len(everything.json()) == 2


@pytest.mark.asyncio
async def test_customer_sees_only_own_orders(client: AsyncClient, test_db, test_customer, test_address):
    from app.models.user import User, UserRole

    order = await create_order(client, test_customer, test_address)

    stranger = User(name="Outro", whatsapp="11900000000", role=UserRole.CUSTOMER)
    test_db.add(stranger)
    await test_db.commit()
    as_user(client, stranger)

    assert (await client.get(f"/api/orders/{order['id']}")).status_code == 403
    assert (await client.get(f"/api/orders/user/{test_customer.id}")).status_code == 403
    assert (await client.get("/api/orders")).status_code == 403

    as_user(client, test_customer)
    mine = await client.get(f"/api/orders/user/{test_customer.id}")
    assert [o["id"] for o in mine.json()] == [order["id"]]

    items = await client.get(f"/api/orders/{order['id']}/items")
    assert [item["product_name"] for item in items.json()] == ["Gin Tônica", "Gelo 5kg"]


@pytest.mark.asyncio
async def test_delivery_fee_correction(client: AsyncClient, test_customer, test_address, test_admin, test_kitchen):
    order = await create_order(client, test_customer, test_address)

    as_user(client, test_kitchen)
    forbidden = await client.patch(f"/api/orders/{order['id']}/delivery-fee", json={"delivery_fee": "12.00"})
    assert forbidden.status_code == 403

    as_user(client, test_admin)
    corrected = await client.patch(f"/api/orders/{order['id']}/delivery-fee", json={"delivery_fee": "12.00"})
    assert corrected.status_code == 200
    data = corrected.json()
    assert float(data["delivery_fee"]) == 12.0
    assert float(data["original_delivery_fee"]) == 8.9
    assert float(data["total"]) == 112.0

    again = await client.patch(f"/api/orders/{order['id']}/delivery-fee", json={"delivery_fee": "4.00"})
    assert again.status_code == 409
    assert again.json()["detail"]["error"] == "delivery_fee_locked"


@pytest.mark.asyncio
async def test_orders_require_authentication(client: AsyncClient):
    response = await client.get("/api/orders")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_address_is_404(customer_client: AsyncClient, test_address):
    response = await customer_client.post("/api/orders", json=order_payload(test_address, address_id=str(uuid4())))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_customer_cannot_order_to_another_customers_address(
    client: AsyncClient, test_db, test_address, test_pdv
):
    from app.models.user import User, UserRole

    stranger = User(name="Outro", whatsapp="11900000001", role=UserRole.CUSTOMER)
    test_db.add(stranger)
    await test_db.commit()
    as_user(client, stranger)

    response = await client.post("/api/orders", json=order_payload(test_address))
    assert response.status_code == 403

    # Staff may place an order for any customer's address
    as_user(client, test_pdv)
    response = await client.post("/api/orders", json=order_payload(test_address))
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_address_with_orders_cannot_be_deleted(client: AsyncClient, test_customer, test_address):
    await create_order(client, test_customer, test_address)

    response = await client.delete(f"/api/addresses/{test_address.id}")

    assert response.status_code == 409
    addresses = (await client.get(f"/api/addresses/{test_customer.id}")).json()
    assert [address["id"] for address in addresses] == [str(test_address.id)]


@pytest.mark.asyncio
async def test_courier_with_orders_cannot_be_deleted(
    client: AsyncClient, test_customer, test_address, test_kitchen, test_admin, test_motoboy
):
    order = await create_order(client, test_customer, test_address)
    as_user(client, test_kitchen)
    for status in ["accepted", "preparing", "ready"]:
        await client.patch(f"/api/orders/{order['id']}/status", json={"status": status})
    await client.patch(f"/api/orders/{order['id']}/assign", json={"motoboy_id": str(test_motoboy.id)})

    as_user(client, test_admin)
    response = await client.delete(f"/api/motoboys/{test_motoboy.id}")
    assert response.status_code == 409

    deactivated = await client.patch(f"/api/motoboys/{test_motoboy.id}", json={"is_active": False})
    assert deactivated.status_code == 200
    assert deactivated.json()["is_active"] is False
