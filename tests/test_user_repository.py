import pytest

from earnapi.core.exceptions import NotFoundError, ReferralCycleError
from earnapi.models.membership import MembershipLevel
from earnapi.models.user import User as UserModel
from earnapi.repositories.user_repository import UserRepository

L = MembershipLevel


@pytest.fixture
def user_repo(db_session):
    return UserRepository(db_session)


class TestReferralTree:
    """추천 트리 조회 및 순환 방지"""

    def test_referrer_chain_is_nearest_first(self, user_repo, make_user):
        c = make_user(L.RANK_3)
        b = make_user(L.RANK_3, referrer_id=c)
        a = make_user(L.RANK_3, referrer_id=b)
        top = make_user(L.RANK_3)
        user_repo.assign_referrer(c, top)
        user = make_user(L.RANK_1, referrer_id=a)

        chain = user_repo.get_referrer_chain(user)

        # 최대 3단계
        assert [ancestor.id for ancestor in chain] == [a, b, c]

    def test_self_referral_is_rejected(self, user_repo, make_user):
        user = make_user()

        with pytest.raises(ReferralCycleError):
            user_repo.assign_referrer(user, user)

    def test_cycle_is_rejected(self, user_repo, make_user):
        root = make_user()
        child = make_user(referrer_id=root)
        grandchild = make_user(referrer_id=child)

        with pytest.raises(ReferralCycleError):
            user_repo.assign_referrer(root, grandchild)

        assert user_repo.get_user(root).referrer_id is None

    def test_chain_stops_at_existing_cycle(self, db_session, user_repo, make_user):
        """DB에 이미 순환이 있어도 무한 루프 없이 종료"""
        first = make_user()
        second = make_user(referrer_id=first)
        db_session.get(UserModel, first).referrer_id = second
        db_session.commit()

        chain = user_repo.get_referrer_chain(first)

        assert [ancestor.id for ancestor in chain] == [second]

    def test_unknown_referrer(self, user_repo, make_user):
        user = make_user()

        with pytest.raises(NotFoundError):
            user_repo.assign_referrer(user, 404)

    def test_salary_candidates_exclude_admins_and_inactive(
        self, db_session, user_repo, make_user
    ):
        member = make_user()
        make_user(role="admin")
        inactive = make_user()
        db_session.get(UserModel, inactive).is_active = False
        db_session.commit()

        assert user_repo.list_salary_candidate_ids() == [member]
