from decimal import Decimal

import pytest

from earnapi.core.exceptions import ConflictError, NotFoundError
from earnapi.models.membership import MembershipLevel
from earnapi.models.wallet import WalletTransaction
from earnapi.repositories.task_repository import TaskRepository
from earnapi.repositories.user_repository import UserRepository
from earnapi.services.task_service import TaskService

L = MembershipLevel


@pytest.fixture
def task_service(db_session):
    return TaskService(db_session)


class TestCompleteTask:
    """작업 완료 → 본인 수입 적립 + 상위 커미션"""

    def test_rank_user_earns_and_pays_upline(self, db_session, task_service, make_user):
        # Given
        referrer = make_user(L.RANK_2)
        user = make_user(L.RANK_1, referrer_id=referrer)

        # When
        result = task_service.complete_task(user, "video:1")

        # Then
        assert result.earnings_amount == Decimal("22.00")
        assert result.new_balance == Decimal("22.00")
        assert result.completion.membership_level == L.RANK_1
        assert len(result.commissions) == 1
        assert result.commissions[0].amount_earned == Decimal("2.20")
        assert result.commissions[0].source_task_id == result.completion.id

        users = UserRepository(db_session)
        assert users.get_user(user).income_wallet == Decimal("22.00")
        assert users.get_user(referrer).income_wallet == Decimal("2.20")

        own_entry = db_session.query(WalletTransaction).filter_by(user_id=user).one()
        assert own_entry.ref_id == f"task:{result.completion.id}"

    def test_intern_earns_fixed_amount_without_commissions(
        self, db_session, task_service, make_user
    ):
        referrer = make_user(L.RANK_5)
        intern = make_user(L.INTERN, referrer_id=referrer)

        result = task_service.complete_task(intern, "video:1")

        assert result.earnings_amount == Decimal("10")
        assert result.commissions == []
        assert UserRepository(db_session).get_user(referrer).income_wallet == Decimal("0")

    def test_same_task_is_completed_once(self, db_session, task_service, make_user):
        user = make_user(L.RANK_1)
        task_service.complete_task(user, "video:1")

        with pytest.raises(ConflictError):
            task_service.complete_task(user, "video:1")

        assert TaskRepository(db_session).count_for_user(user) == 1
        assert UserRepository(db_session).get_user(user).income_wallet == Decimal("22.00")

    def test_task_goes_to_configured_wallet(
        self, db_session, task_service, make_user, update_settings
    ):
        update_settings(task_wallet="personal")
        user = make_user(L.RANK_1)

        task_service.complete_task(user, "video:1")

        stored = UserRepository(db_session).get_user(user)
        assert stored.personal_wallet == Decimal("22.00")
        assert stored.income_wallet == Decimal("0")

    def test_unknown_user(self, task_service):
        with pytest.raises(NotFoundError):
            task_service.complete_task(404, "video:1")
