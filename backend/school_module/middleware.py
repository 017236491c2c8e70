from collections.abc import Callable

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db_session
from .models import User, UserRole
from .ownership import ResourceAccessGuard
from .repositories import SqlRelationshipRepository
from .schemas import Decision, Principal
from .security import AuthError, decode_access_token


ACCESS_DENIED = "You do not have permission to access this resource"


def _parse_token(auth_header: str | None) -> str:
    if not auth_header:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Authorization header")
    parts = auth_header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth scheme")
    return parts[1].strip()


def get_current_principal(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> Principal:
    token = _parse_token(authorization)
    try:
        payload = decode_access_token(token)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    user = db.get(User, str(payload["sub"]))
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user")
    return Principal(user_id=user.id, role=user.role)


def require_roles(*allowed_roles: UserRole) -> Callable:
    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role {principal.role.value} is not allowed to perform this action",
            )
        return principal

    return dependency


def require_ownership(
    resource_type: str,
    param_name: str = "id",
    resolve_id: Callable[[Request], str | None] | None = None,
) -> Callable:
    """Dependency that refuses the request unless the principal owns the addressed resource.

    The id is read from the path, then the query string. Routes that carry it
    anywhere else pass ``resolve_id`` to pull it from the request themselves.
    """

    def dependency(
        request: Request,
        principal: Principal = Depends(get_current_principal),
        db: Session = Depends(get_db_session),
    ) -> Principal:
        if resolve_id is not None:
            resource_id = resolve_id(request)
        else:
            resource_id = request.path_params.get(param_name) or request.query_params.get(param_name)
        if not resource_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Missing {param_name}")

        guard = ResourceAccessGuard(
            SqlRelationshipRepository(db),
            unlisted_policy=Decision.ALLOW if settings.guard_unlisted_policy == "allow" else Decision.DENY,
        )
        if guard.authorize(principal, resource_type, resource_id) is Decision.DENY:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_DENIED)
        return principal

    return dependency
