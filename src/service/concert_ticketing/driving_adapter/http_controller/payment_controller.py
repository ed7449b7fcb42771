from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from src.platform.logging.loguru_io import Logger
from src.service.concert_ticketing.app.command.handle_payment_notification_use_case import (
    HandlePaymentNotificationUseCase,
)
from src.service.concert_ticketing.app.command.initiate_payment_use_case import (
    InitiatePaymentUseCase,
)
from src.service.concert_ticketing.app.command.sync_payment_status_use_case import (
    SyncPaymentStatusUseCase,
)
from src.service.concert_ticketing.app.query.get_payment_use_case import GetPaymentUseCase
from src.service.concert_ticketing.domain.entity.user_entity import UserEntity
from src.service.concert_ticketing.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
)
from src.service.concert_ticketing.driving_adapter.http_controller.schema.payment_schema import (
    PaymentResponse,
    SettlementAckResponse,
)


router = APIRouter()


# Declared before /{order_id} so "webhook" is never parsed as an order id
@router.post('/webhook', status_code=status.HTTP_200_OK)
@Logger.io
async def receive_notification(
    request: Request,
    use_case: HandlePaymentNotificationUseCase = Depends(HandlePaymentNotificationUseCase.depends),
) -> SettlementAckResponse:
    """
    Provider HTTP notification. Authenticated by signature, not by JWT.

    200 for every processed/duplicate/ignored notification so the provider
    stops retrying; 400 malformed, 401 bad signature.
    """
    ack = await use_case.execute(raw_body=await request.body())
    return SettlementAckResponse.from_ack(ack)


@router.post('/{order_id}', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_payment(
    order_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: InitiatePaymentUseCase = Depends(InitiatePaymentUseCase.depends),
) -> PaymentResponse:
    order, payment = await use_case.execute(order_id=order_id, user=current_user)
    return PaymentResponse.from_entities(order, payment)


@router.get('/{order_id}')
@Logger.io
async def get_payment(
    order_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: GetPaymentUseCase = Depends(GetPaymentUseCase.depends),
) -> PaymentResponse:
    order, payment = await use_case.execute(order_id=order_id, user_id=current_user.id)
    return PaymentResponse.from_entities(order, payment)


@router.post('/{order_id}/sync', status_code=status.HTTP_200_OK)
@Logger.io
async def sync_payment(
    order_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: SyncPaymentStatusUseCase = Depends(SyncPaymentStatusUseCase.depends),
) -> SettlementAckResponse:
    ack = await use_case.execute(order_id=order_id, user_id=current_user.id)
    return SettlementAckResponse.from_ack(ack)
