"""
Unit tests for MidtransPaymentGateway

HTTP layer replaced with httpx.MockTransport (FakeMidtrans).
"""

import base64

import httpx
import pytest

from src.platform.exception.exceptions import (
    GatewayRejectedError,
    GatewayUnavailableError,
    InvalidInputError,
)
from src.service.concert_ticketing.domain.value_object.gateway_transaction import (
    GatewayLineItem,
    GatewayTransactionRequest,
)
from src.service.concert_ticketing.domain.value_object.payment_report import (
    PaymentStatusReport,
)
from src.service.concert_ticketing.driven_adapter.payment_gateway.midtrans_payment_gateway import (
    MidtransPaymentGateway,
)
from test.fake_midtrans import FakeMidtrans
from test.test_constants import SERVER_KEY


def _request(**overrides) -> GatewayTransactionRequest:
    fields = {
        'order_ref': 'ORDER-abc',
        'gross_amount': 3_250_000,
        'items': [
            GatewayLineItem(id='1', price=2_500_000, quantity=1, name='Sheila on 7 - VIP'),
            GatewayLineItem(id='2', price=750_000, quantity=1, name='Sheila on 7 - Festival'),
        ],
        'customer_name': 'Test Buyer',
        'customer_email': 'b@t.com',
        'expiry_minutes': 15,
    }
    fields.update(overrides)
    return GatewayTransactionRequest(**fields)


class TestCreateTransaction:
    async def test_returns_token_and_redirect_url(
        self, payment_gateway: MidtransPaymentGateway, fake_midtrans: FakeMidtrans
    ) -> None:
        transaction = await payment_gateway.create_transaction(request=_request())

        assert transaction.token == 'snap-token-ORDER-abc'
        assert transaction.redirect_url is not None

    async def test_snap_payload(
        self, payment_gateway: MidtransPaymentGateway, fake_midtrans: FakeMidtrans
    ) -> None:
        await payment_gateway.create_transaction(request=_request())

        payload = fake_midtrans.snap_payloads[0]
        assert payload['transaction_details'] == {'order_id': 'ORDER-abc', 'gross_amount': 3_250_000}
        assert payload['item_details'][0] == {
            'id': '1',
            'price': 2_500_000,
            'quantity': 1,
            'name': 'Sheila on 7 - VIP',
        }
        assert payload['customer_details'] == {'first_name': 'Test Buyer', 'email': 'b@t.com'}
        assert payload['expiry']['unit'] == 'minute'
        assert payload['expiry']['duration'] == 15

    async def test_basic_auth_uses_server_key(
        self, payment_gateway: MidtransPaymentGateway, fake_midtrans: FakeMidtrans
    ) -> None:
        await payment_gateway.create_transaction(request=_request())

        expected = base64.b64encode(f'{SERVER_KEY}:'.encode()).decode()
        assert fake_midtrans.requests[0].headers['Authorization'] == f'Basic {expected}'

    async def test_long_item_name_is_truncated(
        self, payment_gateway: MidtransPaymentGateway, fake_midtrans: FakeMidtrans
    ) -> None:
        long_name = 'x' * 80
        await payment_gateway.create_transaction(
            request=_request(
                items=[GatewayLineItem(id='1', price=3_250_000, quantity=1, name=long_name)]
            )
        )

        assert len(fake_midtrans.snap_payloads[0]['item_details'][0]['name']) == 50

    async def test_4xx_is_rejected(
        self, payment_gateway: MidtransPaymentGateway, fake_midtrans: FakeMidtrans
    ) -> None:
        fake_midtrans.snap_response = (
            400,
            {'error_messages': ['transaction_details.order_id has already been taken']},
        )

        with pytest.raises(GatewayRejectedError, match='already been taken'):
            await payment_gateway.create_transaction(request=_request())

    async def test_5xx_is_unavailable(
        self, payment_gateway: MidtransPaymentGateway, fake_midtrans: FakeMidtrans
    ) -> None:
        fake_midtrans.snap_response = (503, {'error_messages': ['maintenance']})

        with pytest.raises(GatewayUnavailableError):
            await payment_gateway.create_transaction(request=_request())

    async def test_timeout_is_unavailable(
        self, payment_gateway: MidtransPaymentGateway, fake_midtrans: FakeMidtrans
    ) -> None:
        fake_midtrans.raise_error = httpx.ReadTimeout('timed out')

        with pytest.raises(GatewayUnavailableError, match='timed out'):
            await payment_gateway.create_transaction(request=_request())

    async def test_connection_error_is_unavailable(
        self, payment_gateway: MidtransPaymentGateway, fake_midtrans: FakeMidtrans
    ) -> None:
        fake_midtrans.raise_error = httpx.ConnectError('refused')

        with pytest.raises(GatewayUnavailableError, match='unreachable'):
            await payment_gateway.create_transaction(request=_request())


class TestQueryStatus:
    async def test_known_transaction(
        self, payment_gateway: MidtransPaymentGateway, fake_midtrans: FakeMidtrans
    ) -> None:
        fake_midtrans.set_status(
            order_id='ORDER-abc', gross_amount=3_250_000, transaction_status='settlement'
        )

        report = await payment_gateway.query_status(order_ref='ORDER-abc')

        assert report is not None
        assert report.transaction_status == 'settlement'
        assert report.fraud_status == 'accept'
        assert report.amount_matches(3_250_000)

    async def test_unknown_transaction_is_none(
        self, payment_gateway: MidtransPaymentGateway
    ) -> None:
        assert await payment_gateway.query_status(order_ref='ORDER-missing') is None


class TestVerifyNotification:
    def test_valid_signature(
        self, payment_gateway: MidtransPaymentGateway, fake_midtrans: FakeMidtrans
    ) -> None:
        report = PaymentStatusReport.from_payload(
            fake_midtrans.notification(
                order_id='ORDER-abc', gross_amount=3_250_000, transaction_status='settlement'
            )
        )

        assert payment_gateway.verify_notification(report=report)

    def test_forged_signature(
        self, payment_gateway: MidtransPaymentGateway, fake_midtrans: FakeMidtrans
    ) -> None:
        report = PaymentStatusReport.from_payload(
            fake_midtrans.notification(
                order_id='ORDER-abc',
                gross_amount=3_250_000,
                transaction_status='settlement',
                signed=False,
            )
        )

        assert not payment_gateway.verify_notification(report=report)

    def test_tampered_amount(
        self, payment_gateway: MidtransPaymentGateway, fake_midtrans: FakeMidtrans
    ) -> None:
        payload = fake_midtrans.notification(
            order_id='ORDER-abc', gross_amount=3_250_000, transaction_status='settlement'
        )
        payload['gross_amount'] = '1.00'

        assert not payment_gateway.verify_notification(
            report=PaymentStatusReport.from_payload(payload)
        )

    def test_missing_signature(self, payment_gateway: MidtransPaymentGateway) -> None:
        report = PaymentStatusReport.from_payload(
            {'order_id': 'ORDER-abc', 'transaction_status': 'settlement', 'status_code': '200'}
        )

        assert not payment_gateway.verify_notification(report=report)


class TestPaymentStatusReport:
    @pytest.mark.parametrize(
        'payload',
        [
            [],
            'settlement',
            {'transaction_status': 'settlement'},
            {'order_id': 'ORDER-abc'},
            {'order_id': 'ORDER-abc', 'transaction_status': 'settlement', 'gross_amount': 'abc'},
        ],
    )
    def test_malformed_payload_is_invalid_input(self, payload) -> None:
        with pytest.raises(InvalidInputError):
            PaymentStatusReport.from_payload(payload)

    def test_amount_matches_decimal_string(self) -> None:
        report = PaymentStatusReport.from_payload(
            {'order_id': 'ORDER-abc', 'transaction_status': 'settlement', 'gross_amount': '3250000.00'}
        )

        assert report.amount_matches(3_250_000)
        assert not report.amount_matches(3_250_001)
