"""Shared steps for the HTTP integration tests: place, pay and settle an order."""

from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import httpx
import orjson
import pytest
from sqlalchemy import update

from src.service.concert_ticketing.driven_adapter.model.order_model import OrderModel
from test.fake_midtrans import FakeMidtrans
from test.test_constants import ORDER_BASE, PAYMENT_BASE, PAYMENT_WEBHOOK


@pytest.fixture
def place_order(
    client: httpx.AsyncClient, catalog: dict[str, int], buyer_headers: dict[str, str]
) -> Callable[..., Awaitable[dict[str, Any]]]:
    """VIP x1 + Festival x1 (3,250,000) unless items are given."""

    async def _place(
        items: list[dict[str, int]] | None = None, headers: dict[str, str] | None = None
    ) -> dict[str, Any]:
        response = await client.post(
            ORDER_BASE,
            json={
                'concert_id': catalog['concert_id'],
                'items': items
                or [
                    {'ticket_type_id': catalog['vip_id'], 'qty': 1},
                    {'ticket_type_id': catalog['festival_id'], 'qty': 1},
                ],
            },
            headers=headers or buyer_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _place


@pytest.fixture
def initiate_payment(
    client: httpx.AsyncClient, buyer_headers: dict[str, str]
) -> Callable[..., Awaitable[dict[str, Any]]]:
    async def _initiate(order_id: str, headers: dict[str, str] | None = None) -> dict[str, Any]:
        response = await client.post(f'{PAYMENT_BASE}/{order_id}', headers=headers or buyer_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _initiate


@pytest.fixture
def send_notification(
    client: httpx.AsyncClient, fake_midtrans: FakeMidtrans
) -> Callable[..., Awaitable[httpx.Response]]:
    async def _send(order: dict[str, Any], transaction_status: str, **kwargs: Any) -> httpx.Response:
        kwargs.setdefault('gross_amount', order['gross_amount'])
        payload = fake_midtrans.notification(
            order_id=order['external_order_ref'], transaction_status=transaction_status, **kwargs
        )
        return await client.post(
            PAYMENT_WEBHOOK,
            content=orjson.dumps(payload),
            headers={'Content-Type': 'application/json'},
        )

    return _send


@pytest.fixture
def force_expiry(session_scope: Callable[[], Any]) -> Callable[[str], Awaitable[None]]:
    """Move an order's expires_at into the past without touching its status."""

    async def _expire(order_id: str) -> None:
        async with session_scope() as session:
            await session.execute(
                update(OrderModel)
                .where(OrderModel.id == UUID(order_id))
                .values(expires_at=datetime.now(timezone.utc) - timedelta(minutes=1))
            )
            await session.commit()

    return _expire
