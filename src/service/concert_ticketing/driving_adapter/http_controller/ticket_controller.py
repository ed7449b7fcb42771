from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.concert_ticketing.app.command.use_ticket_use_case import UseTicketUseCase
from src.service.concert_ticketing.app.command.void_ticket_use_case import VoidTicketUseCase
from src.service.concert_ticketing.app.query.list_tickets_use_case import ListTicketsUseCase
from src.service.concert_ticketing.app.query.validate_ticket_use_case import (
    ValidateTicketUseCase,
)
from src.service.concert_ticketing.domain.entity.user_entity import UserEntity
from src.service.concert_ticketing.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_admin,
)
from src.service.concert_ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    TicketResponse,
)


router = APIRouter()


@router.get('', response_model=List[TicketResponse])
@Logger.io
async def list_my_tickets(
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListTicketsUseCase = Depends(ListTicketsUseCase.depends),
) -> List[TicketResponse]:
    tickets = await use_case.list_user_tickets(user_id=current_user.id)
    return [TicketResponse.from_entity(ticket) for ticket in tickets]


@router.get('/code/{code}/validate')
@Logger.io
async def validate_ticket(
    code: str,
    current_user: UserEntity = Depends(require_admin),
    use_case: ValidateTicketUseCase = Depends(ValidateTicketUseCase.depends),
) -> TicketResponse:
    return TicketResponse.from_entity(await use_case.execute(redemption_code=code))


@router.patch('/code/{code}/use')
@Logger.io
async def use_ticket(
    code: str,
    current_user: UserEntity = Depends(require_admin),
    use_case: UseTicketUseCase = Depends(UseTicketUseCase.depends),
) -> TicketResponse:
    return TicketResponse.from_entity(await use_case.execute(redemption_code=code))


@router.patch('/code/{code}/void')
@Logger.io
async def void_ticket(
    code: str,
    current_user: UserEntity = Depends(require_admin),
    use_case: VoidTicketUseCase = Depends(VoidTicketUseCase.depends),
) -> TicketResponse:
    return TicketResponse.from_entity(await use_case.execute(redemption_code=code))


@router.get('/{ticket_id}')
@Logger.io
async def get_ticket(
    ticket_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListTicketsUseCase = Depends(ListTicketsUseCase.depends),
) -> TicketResponse:
    ticket = await use_case.get_user_ticket(ticket_id=ticket_id, user_id=current_user.id)
    return TicketResponse.from_entity(ticket)
