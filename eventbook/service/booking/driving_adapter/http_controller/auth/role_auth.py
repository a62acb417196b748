from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Cookie, Depends, Header
from opentelemetry import trace

from eventbook.platform.config.core_setting import settings
from eventbook.platform.config.di import Container
from eventbook.service.booking.domain.booking_errors import UnauthorizedError
from eventbook.service.booking.domain.entity.user_entity import UserEntity
from eventbook.service.booking.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class RoleAuthStrategy:
    @staticmethod
    def is_admin(user: UserEntity) -> bool:
        return user.is_admin


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(' ')
    return token.strip() if scheme.lower() == 'bearer' and token else None


@inject
async def get_current_user(
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
    cookie_token: Optional[str] = Cookie(None, alias=settings.AUTH_COOKIE_NAME),
    authorization: Optional[str] = Header(None),
) -> UserEntity:
    """Caller from the auth cookie, or from an `Authorization: Bearer` header."""
    return jwt_auth.get_current_user_info_from_jwt(cookie_token or _bearer_token(authorization))


async def require_admin(current_user: UserEntity = Depends(get_current_user)) -> UserEntity:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_admin',
        attributes={'user.id': current_user.id, 'user.role': current_user.role.value},
    ):
        if not RoleAuthStrategy.is_admin(current_user):
            raise UnauthorizedError('Only admins can perform this action')
        return current_user
