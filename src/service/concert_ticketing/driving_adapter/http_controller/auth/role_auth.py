from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError
from src.service.concert_ticketing.domain.entity.user_entity import UserEntity, UserRole
from src.service.concert_ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


bearer_scheme = HTTPBearer(auto_error=False)


class RoleAuthStrategy:
    @staticmethod
    def can_create_order(user: UserEntity) -> bool:
        return user.role == UserRole.BUYER

    @staticmethod
    def can_operate_gate(user: UserEntity) -> bool:
        return user.role == UserRole.ADMIN


@inject
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    cookie_token: Optional[str] = Cookie(None, alias='fastapiusersauth'),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> UserEntity:
    """Bearer header first, then the auth cookie."""
    token = credentials.credentials if credentials else cookie_token
    return jwt_auth.get_current_user_info_from_jwt(token)


async def require_buyer(current_user: UserEntity = Depends(get_current_user)) -> UserEntity:
    if not RoleAuthStrategy.can_create_order(current_user):
        raise ForbiddenError('Only buyers can perform this action')
    return current_user


async def require_admin(current_user: UserEntity = Depends(get_current_user)) -> UserEntity:
    if not RoleAuthStrategy.can_operate_gate(current_user):
        raise ForbiddenError('Only admins can perform this action')
    return current_user
