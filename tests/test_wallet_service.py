from decimal import Decimal

import pytest

from earnapi.core.exceptions import NegativeBalanceError, NotFoundError, ValidationError
from earnapi.database.session import atomic
from earnapi.models.membership import MembershipLevel
from earnapi.models.wallet import WalletKind, WalletTransaction
from earnapi.repositories.user_repository import UserRepository
from earnapi.services.wallet_service import WalletService


@pytest.fixture
def wallet_service(db_session):
    return WalletService(db_session)


@pytest.fixture
def user_id(make_user):
    return make_user(MembershipLevel.RANK_1)


class TestCreditWallet:
    """지갑 적립/차감 테스트"""

    def test_credit_updates_balance_and_ledger(self, db_session, wallet_service, user_id):
        # When
        with atomic(db_session):
            balance = wallet_service.credit_wallet(
                user_id, WalletKind.INCOME, Decimal("25.50"), "test credit", "test:1"
            )

        # Then
        assert balance == Decimal("25.50")
        entry = db_session.query(WalletTransaction).one()
        assert entry.wallet == "income"
        assert entry.delta == Decimal("25.50")
        assert entry.balance_after == Decimal("25.50")
        assert UserRepository(db_session).get_user(user_id).income_wallet == Decimal("25.50")

    def test_same_ref_id_is_applied_once(self, db_session, wallet_service, user_id):
        """같은 ref_id 재호출은 기록된 잔액만 반환"""
        with atomic(db_session):
            wallet_service.credit_wallet(user_id, WalletKind.INCOME, Decimal("10"), "first", "dup:1")
        with atomic(db_session):
            balance = wallet_service.credit_wallet(
                user_id, WalletKind.INCOME, Decimal("10"), "retry", "dup:1"
            )

        assert balance == Decimal("10")
        assert db_session.query(WalletTransaction).count() == 1

    def test_wallets_are_independent(self, db_session, wallet_service, user_id):
        with atomic(db_session):
            wallet_service.credit_wallet(user_id, WalletKind.INCOME, Decimal("5"), "a", "w:1")
            wallet_service.credit_wallet(user_id, WalletKind.PERSONAL, Decimal("7"), "b", "w:2")

        balances = wallet_service.get_balances(user_id)
        assert balances.income_wallet == Decimal("5")
        assert balances.personal_wallet == Decimal("7")

    def test_negative_result_is_rejected(self, db_session, wallet_service, user_id):
        """잔액 부족 차감은 보정 없이 거부되고 롤백"""
        with atomic(db_session):
            wallet_service.credit_wallet(user_id, WalletKind.INCOME, Decimal("5"), "seed", "neg:1")

        with pytest.raises(NegativeBalanceError):
            with atomic(db_session):
                wallet_service.credit_wallet(
                    user_id, WalletKind.INCOME, Decimal("-6"), "overdraw", "neg:2"
                )

        assert UserRepository(db_session).get_user(user_id).income_wallet == Decimal("5")
        assert db_session.query(WalletTransaction).count() == 1

    def test_debit_within_balance(self, db_session, wallet_service, user_id):
        with atomic(db_session):
            wallet_service.credit_wallet(user_id, WalletKind.INCOME, Decimal("5"), "seed", "d:1")
            balance = wallet_service.credit_wallet(
                user_id, WalletKind.INCOME, Decimal("-5"), "withdraw", "d:2"
            )

        assert balance == Decimal("0")

    def test_unknown_user(self, db_session, wallet_service):
        with pytest.raises(NotFoundError):
            with atomic(db_session):
                wallet_service.credit_wallet(404, WalletKind.INCOME, Decimal("1"), "x", "u:1")

    def test_ref_id_required(self, wallet_service, user_id):
        with pytest.raises(ValidationError):
            wallet_service.credit_wallet(user_id, WalletKind.INCOME, Decimal("1"), "x", "")


class TestLedgerAndIntegrity:
    def test_ledger_is_newest_first_with_paging(self, db_session, wallet_service, user_id):
        with atomic(db_session):
            for n in range(3):
                wallet_service.credit_wallet(
                    user_id, WalletKind.INCOME, Decimal("1"), f"credit {n}", f"l:{n}"
                )

        ledger = wallet_service.get_ledger(user_id, limit=2, offset=0)

        assert ledger.total_count == 3
        assert ledger.has_next is True
        assert [entry.ref_id for entry in ledger.entries] == ["l:2", "l:1"]
        assert ledger.balance.income_wallet == Decimal("3")

    def test_integrity_ok(self, db_session, wallet_service, user_id):
        with atomic(db_session):
            wallet_service.credit_wallet(user_id, WalletKind.INCOME, Decimal("3"), "x", "i:1")

        results = {r.wallet: r for r in wallet_service.verify_integrity_for_user(user_id)}

        assert results[WalletKind.INCOME].status == "OK"
        assert results[WalletKind.INCOME].entry_count == 1
        assert results[WalletKind.PERSONAL].status == "OK"

    def test_integrity_detects_direct_balance_edit(self, db_session, wallet_service, user_id):
        """원장을 거치지 않은 잔액 변경은 MISMATCH"""
        with atomic(db_session):
            wallet_service.credit_wallet(user_id, WalletKind.INCOME, Decimal("3"), "x", "i:2")
        with atomic(db_session):
            UserRepository(db_session).get_for_update(user_id).income_wallet = Decimal("100")

        results = {r.wallet: r for r in wallet_service.verify_integrity_for_user(user_id)}

        assert results[WalletKind.INCOME].status == "MISMATCH"
        assert results[WalletKind.INCOME].recorded_balance == Decimal("100")
