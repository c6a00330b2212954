from uuid import UUID
import logging

from ..core.errors import AuthorizationError
from ..core.security import UserRole
from ..repositories.auth_repository import AuthRepository

logger = logging.getLogger(__name__)


class RoleGuard:
    """Checks role membership against the store on every call.

    Roles are not carried in the token. Grants can change after a token
    is issued.
    """

    def __init__(self, repo: AuthRepository):
        self.repo = repo

    def has_role(self, user_id: UUID, role: UserRole) -> bool:
        return self.repo.has_role(user_id, role)

    def require_role(self, user_id: UUID, role: UserRole) -> None:
        if not self.has_role(user_id, role):
            logger.info(f"User {user_id} denied: {role.value} role required")
            raise AuthorizationError(f"Access denied. Required role: {role.value}")
