from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.concert_ticketing.app.command.cancel_order_use_case import CancelOrderUseCase
from src.service.concert_ticketing.app.command.create_order_use_case import CreateOrderUseCase
from src.service.concert_ticketing.app.query.get_order_use_case import GetOrderUseCase
from src.service.concert_ticketing.app.query.list_orders_use_case import ListOrdersUseCase
from src.service.concert_ticketing.domain.entity.user_entity import UserEntity
from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_buyer,
)
from src.service.concert_ticketing.driving_adapter.http_controller.schema.order_schema import (
    OrderCreateRequest,
    OrderResponse,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_order(
    request: OrderCreateRequest,
    current_user: UserEntity = Depends(require_buyer),
    use_case: CreateOrderUseCase = Depends(CreateOrderUseCase.depends),
) -> OrderResponse:
    order = await use_case.execute(
        user_id=current_user.id,
        concert_id=request.concert_id,
        items=[(item.ticket_type_id, item.qty) for item in request.items],
    )
    return OrderResponse.from_entity(order)


@router.get('', response_model=List[OrderResponse])
@Logger.io
async def list_my_orders(
    order_status: Optional[OrderStatus] = None,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListOrdersUseCase = Depends(ListOrdersUseCase.depends),
) -> List[OrderResponse]:
    orders = await use_case.execute(user_id=current_user.id, status=order_status)
    return [OrderResponse.from_entity(order) for order in orders]


@router.get('/{order_id}')
@Logger.io
async def get_order(
    order_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: GetOrderUseCase = Depends(GetOrderUseCase.depends),
) -> OrderResponse:
    order = await use_case.execute(order_id=order_id, user_id=current_user.id)
    return OrderResponse.from_entity(order)


@router.patch('/{order_id}/cancel', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_order(
    order_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: CancelOrderUseCase = Depends(CancelOrderUseCase.depends),
) -> OrderResponse:
    order = await use_case.execute(order_id=order_id, user_id=current_user.id)
    return OrderResponse.from_entity(order)
