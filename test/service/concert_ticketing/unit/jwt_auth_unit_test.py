from fastapi import HTTPException
import jwt
import pytest

from src.service.concert_ticketing.domain.entity.user_entity import UserEntity, UserRole
from src.service.concert_ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


@pytest.mark.unit
class TestJwtAuth:
    @pytest.fixture
    def jwt_auth(self) -> JwtAuth:
        return JwtAuth()

    def test_principal_comes_from_claims(self, jwt_auth: JwtAuth) -> None:
        token = jwt_auth.create_jwt_token(
            UserEntity(id=7, email='gate@t.com', name='Gate', role=UserRole.ADMIN, phone='0812')
        )

        user = jwt_auth.get_current_user_info_from_jwt(token)

        assert user.id == 7
        assert user.is_admin
        assert user.phone == '0812'

    def test_missing_token(self, jwt_auth: JwtAuth) -> None:
        with pytest.raises(HTTPException) as exc_info:
            jwt_auth.get_current_user_info_from_jwt(None)
        assert exc_info.value.status_code == 401

    def test_token_signed_with_another_secret(self, jwt_auth: JwtAuth) -> None:
        forged = jwt.encode({'user_id': 1, 'role': 'admin'}, 'not-the-secret', algorithm='HS256')

        with pytest.raises(HTTPException) as exc_info:
            jwt_auth.get_current_user_info_from_jwt(forged)
        assert exc_info.value.status_code == 401

    def test_unknown_role(self, jwt_auth: JwtAuth) -> None:
        token = jwt.encode(
            {'user_id': 1, 'role': 'seller'}, jwt_auth.secret, algorithm=jwt_auth.algorithm
        )

        with pytest.raises(HTTPException) as exc_info:
            jwt_auth.get_current_user_info_from_jwt(token)
        assert exc_info.value.status_code == 401

    def test_inactive_user(self, jwt_auth: JwtAuth) -> None:
        token = jwt_auth.create_jwt_token(UserEntity(id=3, is_active=False))

        with pytest.raises(HTTPException) as exc_info:
            jwt_auth.get_current_user_info_from_jwt(token)
        assert exc_info.value.status_code == 403
