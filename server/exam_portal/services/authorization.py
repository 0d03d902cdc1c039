"""
Authorization guard.

Pure decisions over records the caller has already fetched: no store
access and no side effects beyond logging a denial.
"""
import logging
from typing import Callable, Optional

from exam_portal.errors import Forbidden, NotFound, Unauthenticated
from exam_portal.models import User, UserRole
from exam_portal.repository import ExamRepository
from exam_portal.security import Identity

logger = logging.getLogger(__name__)

OwnerCheck = Callable[[User], bool]


def authorize(
    identity: Optional[Identity],
    user: Optional[User],
    required_role: Optional[UserRole] = None,
    owner_check: Optional[OwnerCheck] = None,
    denied_message: str = "Access forbidden",
) -> User:
    """
    Return ``user`` when the caller may proceed.

    A caller passes when it holds ``required_role`` or, failing that, when
    ``owner_check`` says it is the owner/subject of the resource. With
    neither given any known user passes.
    """
    if identity is None:
        raise Unauthenticated()
    if user is None:
        raise NotFound("User not found")

    if required_role is None and owner_check is None:
        return user
    if required_role is not None and UserRole.normalize(user.role) is required_role:
        return user
    if owner_check is not None and owner_check(user):
        return user

    logger.warning(
        "Access denied: user %s with role %s (required %s)",
        user.id, user.role, required_role.value if required_role else "owner",
    )
    raise Forbidden(denied_message)


def resolve_caller(
    repo: ExamRepository,
    identity: Optional[Identity],
    required_role: Optional[UserRole] = None,
    owner_check: Optional[OwnerCheck] = None,
    denied_message: str = "Access forbidden",
) -> User:
    """Look up the stored user behind ``identity`` and run ``authorize`` on it."""
    if identity is None:
        raise Unauthenticated()
    user = repo.get_user_by_email(identity.email)
    return authorize(identity, user, required_role, owner_check, denied_message)


def is_subject(student_id: str) -> OwnerCheck:
    """Owner check: the caller is the student the resource is about."""
    return lambda user: user.id == student_id
