"""
Stateless JWT identity: tokens carry the user id and role, no DB lookup.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from eventbook.platform.config.core_setting import settings
from eventbook.platform.exception.exceptions import AuthenticationError
from eventbook.service.booking.domain.entity.user_entity import UserEntity, UserRole


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_jwt_token(self, user_entity: UserEntity) -> str:
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            'sub': str(user_entity.id),
            'exp': now + timedelta(minutes=self.token_expire_minutes),
            'iat': now,
            'user_id': user_entity.id,
            'role': user_entity.role.value,
        }
        if user_entity.email:
            payload['email'] = user_entity.email
        if user_entity.name:
            payload['name'] = user_entity.name

        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError('Token expired')
        except jwt.PyJWTError:
            raise AuthenticationError('Invalid token')

    def get_current_user_info_from_jwt(self, token: Optional[str]) -> UserEntity:
        if not token:
            raise AuthenticationError('Not authenticated')

        payload = self.decode_jwt_token(token)

        user_id = payload.get('user_id')
        role = payload.get('role')
        if not isinstance(user_id, int) or not role:
            raise AuthenticationError('Invalid token')

        try:
            user_role = UserRole(role)
        except ValueError:
            raise AuthenticationError('Invalid token')

        user = UserEntity(
            id=user_id,
            role=user_role,
            email=payload.get('email'),
            name=payload.get('name'),
        )
        user.validate_exists()
        return user
