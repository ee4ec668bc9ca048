"""Bearer token verification. Tokens are minted by the identity service, not here."""

from dataclasses import dataclass
from typing import Iterable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from .config import get_settings
from .errors import AuthenticationError, AuthorizationError
from .statuses import Role

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    actor_id: int
    role: str
    customer_id: Optional[int] = None

    @property
    def is_customer(self) -> bool:
        return self.role == Role.CUSTOMER.value


def decode_token(token: str) -> Actor:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise AuthenticationError("Invalid token") from exc

    sub = payload.get("sub")
    role = payload.get("role")
    if sub is None or not role:
        raise AuthenticationError("Invalid token")
    try:
        actor_id = int(sub)
    except (TypeError, ValueError) as exc:
        raise AuthenticationError("Invalid token") from exc

    customer_id = payload.get("customer_id")
    return Actor(
        actor_id=actor_id,
        role=str(role),
        customer_id=int(customer_id) if customer_id is not None else None,
    )


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing authorization token")
    return decode_token(credentials.credentials)


def require_role(actor: Actor, allowed: Iterable[Role]) -> None:
    if actor.role not in {role.value for role in allowed}:
        raise AuthorizationError(f"Role {actor.role} cannot access this resource")
