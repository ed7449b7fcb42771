"""
Midtrans payment gateway adapter

- Snap API opens the transaction: POST {snap}/snap/v1/transactions
- Core API reports status:        GET  {api}/v2/{order_id}/status
- Notifications are signed:       sha512(order_id + status_code + gross_amount + server_key)

https://docs.midtrans.com/reference/backend-integration
https://docs.midtrans.com/docs/https-notification-webhooks
"""

from datetime import datetime, timezone
import hashlib
import hmac
import time
from typing import Any, Optional

import httpx
import orjson

from src.platform.config.core_setting import Settings
from src.platform.exception.exceptions import GatewayRejectedError, GatewayUnavailableError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.concert_ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.concert_ticketing.domain.value_object.gateway_transaction import (
    GatewayTransaction,
    GatewayTransactionRequest,
)
from src.service.concert_ticketing.domain.value_object.payment_report import (
    PaymentStatusReport,
)


# Midtrans rejects item names longer than 50 characters
_MAX_ITEM_NAME_LENGTH = 50


class MidtransPaymentGateway(IPaymentGateway):
    def __init__(
        self,
        *,
        server_key: str,
        snap_base_url: str,
        api_base_url: str,
        timeout_seconds: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._server_key = server_key
        self._snap_base_url = snap_base_url.rstrip('/')
        self._api_base_url = api_base_url.rstrip('/')
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> 'MidtransPaymentGateway':
        return cls(
            server_key=settings.MIDTRANS_SERVER_KEY.get_secret_value(),
            snap_base_url=settings.MIDTRANS_SNAP_BASE_URL,
            api_base_url=settings.MIDTRANS_API_BASE_URL,
            timeout_seconds=settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS,
        )

    def _client(self) -> httpx.AsyncClient:
        # Basic auth: server key as username, empty password
        return httpx.AsyncClient(
            auth=(self._server_key, ''),
            timeout=self._timeout,
            transport=self._transport,
            headers={'Accept': 'application/json', 'Content-Type': 'application/json'},
        )

    @staticmethod
    def build_snap_payload(request: GatewayTransactionRequest) -> dict[str, Any]:
        payload: dict[str, Any] = {
            'transaction_details': {
                'order_id': request.order_ref,
                'gross_amount': request.gross_amount,
            },
            'item_details': [
                {
                    'id': item.id,
                    'price': item.price,
                    'quantity': item.quantity,
                    'name': item.name[:_MAX_ITEM_NAME_LENGTH],
                }
                for item in request.items
            ],
            'customer_details': {
                'first_name': request.customer_name,
                'email': request.customer_email,
            },
            'expiry': {
                'start_time': datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S +0000'),
                'unit': 'minute',
                'duration': max(request.expiry_minutes, 1),
            },
        }
        if request.customer_phone:
            payload['customer_details']['phone'] = request.customer_phone
        return payload

    async def _send(self, operation: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        started = time.perf_counter()
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            metrics.gateway_requests.labels(operation=operation, result='unavailable').inc()
            raise GatewayUnavailableError(f'Payment gateway timed out: {type(e).__name__}')
        except httpx.TransportError as e:
            metrics.gateway_requests.labels(operation=operation, result='unavailable').inc()
            raise GatewayUnavailableError(f'Payment gateway unreachable: {type(e).__name__}')
        finally:
            metrics.gateway_request_duration.labels(operation=operation).observe(
                time.perf_counter() - started
            )

        if response.status_code >= 500:
            metrics.gateway_requests.labels(operation=operation, result='unavailable').inc()
            raise GatewayUnavailableError(f'Payment gateway error: HTTP {response.status_code}')
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = orjson.loads(response.content)
        except orjson.JSONDecodeError:
            raise GatewayUnavailableError(
                f'Payment gateway returned a non-JSON body (HTTP {response.status_code})'
            )
        return body if isinstance(body, dict) else {}

    @Logger.io
    async def create_transaction(self, *, request: GatewayTransactionRequest) -> GatewayTransaction:
        response = await self._send(
            'create_transaction',
            'POST',
            f'{self._snap_base_url}/snap/v1/transactions',
            content=orjson.dumps(self.build_snap_payload(request)),
        )
        body = self._json(response)

        if response.status_code >= 400 or not body.get('token'):
            metrics.gateway_requests.labels(operation='create_transaction', result='rejected').inc()
            messages = body.get('error_messages') or [f'HTTP {response.status_code}']
            raise GatewayRejectedError(
                f'Payment gateway rejected the transaction: {"; ".join(map(str, messages))}'
            )

        metrics.gateway_requests.labels(operation='create_transaction', result='ok').inc()
        Logger.base.info(f'💳 [MIDTRANS] Snap transaction opened for {request.order_ref}')
        return GatewayTransaction(token=body['token'], redirect_url=body.get('redirect_url'))

    @Logger.io
    async def query_status(self, *, order_ref: str) -> Optional[PaymentStatusReport]:
        response = await self._send(
            'query_status', 'GET', f'{self._api_base_url}/v2/{order_ref}/status'
        )
        if response.status_code == 404:
            metrics.gateway_requests.labels(operation='query_status', result='ok').inc()
            return None

        body = self._json(response)
        # Core API answers HTTP 200 with status_code "404" for unknown transactions
        if str(body.get('status_code', '')) == '404':
            metrics.gateway_requests.labels(operation='query_status', result='ok').inc()
            return None
        if response.status_code >= 400 or not body.get('transaction_status'):
            metrics.gateway_requests.labels(operation='query_status', result='rejected').inc()
            raise GatewayRejectedError(
                f'Payment gateway refused the status query: '
                f'{body.get("status_message") or response.status_code}'
            )

        metrics.gateway_requests.labels(operation='query_status', result='ok').inc()
        body.setdefault('order_id', order_ref)
        return PaymentStatusReport.from_payload(body)

    def signature_for(self, *, order_id: str, status_code: str, gross_amount: str) -> str:
        raw = f'{order_id}{status_code}{gross_amount}{self._server_key}'
        return hashlib.sha512(raw.encode('utf-8')).hexdigest()

    def verify_notification(self, *, report: PaymentStatusReport) -> bool:
        if not (report.signature_key and report.status_code and report.gross_amount):
            return False
        expected = self.signature_for(
            order_id=report.order_ref,
            status_code=report.status_code,
            gross_amount=report.gross_amount,
        )
        return hmac.compare_digest(expected, report.signature_key.lower())
