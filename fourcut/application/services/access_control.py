"""Access control - album role derivation and permission checks.

Roles are never stored: they are computed from the album's owner,
member and guest fields every time they are needed, so a membership
change takes effect on the very next check.
"""
import logging
from typing import Iterable

from ..errors import PermissionDeniedError
from ..models import Album, Role

logger = logging.getLogger(__name__)


class AccessControl:
    """Evaluates a user's role in an album.

    Permission matrix:
    - OWNER: everything, including rename/re-member/delete album
    - MEMBER: upload into empty slots, edit and delete pictures
    - GUEST: read pictures and search tags
    """

    OWNER_ONLY = frozenset({Role.OWNER})
    CONTRIBUTORS = frozenset({Role.OWNER, Role.MEMBER})
    VIEWERS = frozenset({Role.OWNER, Role.MEMBER, Role.GUEST})

    @staticmethod
    def role_of(album: Album, user_id: int) -> Role:
        """Get user's role in an album.

        Args:
            album: Album with membership fields loaded
            user_id: User ID

        Returns:
            OWNER, MEMBER, GUEST or NONE
        """
        if album.owner_id == user_id:
            return Role.OWNER
        if user_id in album.member_ids:
            return Role.MEMBER
        if user_id in album.guest_ids:
            return Role.GUEST
        return Role.NONE

    def require(self, album: Album, user_id: int, allowed_roles: Iterable[Role]) -> Role:
        """Ensure user's role is one of ``allowed_roles``.

        Returns:
            The user's role

        Raises:
            PermissionDeniedError: If the role is not allowed
        """
        role = self.role_of(album, user_id)
        if role not in allowed_roles:
            logger.warning(
                "Denied user %s with role %s on album %s", user_id, role.value, album.id
            )
            raise PermissionDeniedError(
                f"Role {role.value} is not allowed to perform this action"
            )
        return role
