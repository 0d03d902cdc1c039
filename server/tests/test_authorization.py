import pytest

from exam_portal.errors import Forbidden, NotFound, Unauthenticated
from exam_portal.models import User, UserRole
from exam_portal.security import Identity
from exam_portal.services.authorization import authorize, is_subject, resolve_caller

TEACHER = User(id="t1", email="t@school.test", role=UserRole.TEACHER)
STUDENT = User(id="s1", email="s@school.test", role=UserRole.STUDENT)


def test_missing_identity_is_unauthenticated():
    with pytest.raises(Unauthenticated):
        authorize(None, TEACHER)


def test_unknown_user_is_not_found():
    with pytest.raises(NotFound, match="User not found"):
        authorize(Identity("ghost@school.test"), None)


def test_required_role_passes():
    assert authorize(Identity(TEACHER.email), TEACHER, UserRole.TEACHER) is TEACHER


def test_wrong_role_is_forbidden_with_message():
    with pytest.raises(Forbidden, match="Only students"):
        authorize(Identity(TEACHER.email), TEACHER, UserRole.STUDENT, denied_message="Only students")


def test_subject_may_act_without_the_role():
    assert authorize(Identity(STUDENT.email), STUDENT, UserRole.TEACHER, is_subject("s1")) is STUDENT


def test_other_student_is_forbidden():
    with pytest.raises(Forbidden):
        authorize(Identity(STUDENT.email), STUDENT, UserRole.TEACHER, is_subject("s2"))


def test_role_stored_in_lower_case_still_matches():
    legacy = User(id="t2", email="legacy@school.test", role="teacher")
    assert authorize(Identity(legacy.email), legacy, UserRole.TEACHER) is legacy


def test_resolve_caller_looks_up_by_email(repo):
    user = resolve_caller(repo, Identity("ada@school.test"), UserRole.STUDENT)
    assert user is repo.student


def test_resolve_caller_unknown_email(repo):
    with pytest.raises(NotFound):
        resolve_caller(repo, Identity("nobody@school.test"))
