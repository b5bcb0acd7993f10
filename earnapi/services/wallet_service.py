from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session
import logging

from earnapi.core.exceptions import NotFoundError, ValidationError
from earnapi.models.wallet import WalletKind
from earnapi.repositories.user_repository import UserRepository
from earnapi.repositories.wallet_repository import WalletRepository
from earnapi.schemas.wallet import (
    WalletBalanceResponse,
    WalletCreditResult,
    WalletIntegrityCheckResponse,
    WalletLedgerResponse,
)

logger = logging.getLogger(__name__)


class WalletService:
    """지갑 정산 서비스 - 잔액 변경은 모두 이 서비스를 통해서만 수행"""

    def __init__(self, db: Session):
        self.db = db
        self.wallet_repo = WalletRepository(db)
        self.user_repo = UserRepository(db)

    def credit_wallet(
        self,
        user_id: int,
        wallet_kind: WalletKind,
        amount: Decimal,
        reason: str,
        ref_id: str,
    ) -> Decimal:
        """지갑 적립 (음수 amount는 차감)

        트랜잭션을 열거나 커밋하지 않음. 호출자의 작업 단위 안에서 실행되며
        같은 ref_id로 다시 호출하면 기록된 잔액만 반환합니다.

        Args:
            user_id: 사용자 ID
            wallet_kind: 대상 지갑
            amount: 변동 금액
            reason: 원장에 남길 사유
            ref_id: 멱등 키

        Returns:
            Decimal: 거래 후 잔액
        """
        result = self.apply(user_id, wallet_kind, amount, reason, ref_id)
        return result.balance_after

    def apply(
        self,
        user_id: int,
        wallet_kind: WalletKind,
        amount: Decimal,
        reason: str,
        ref_id: str,
    ) -> WalletCreditResult:
        if not ref_id:
            raise ValidationError("ref_id is required for wallet mutations")

        result = self.wallet_repo.apply_delta(
            user_id=user_id,
            wallet=wallet_kind,
            delta=Decimal(str(amount)),
            reason=reason,
            ref_id=ref_id,
        )
        if result.duplicate:
            logger.info(f"Wallet mutation {ref_id} already applied, skipping")
        else:
            logger.debug(
                f"Wallet {result.wallet.value} of user {user_id}: {result.delta:+} -> {result.balance_after} ({ref_id})"
            )
        return result

    def get_balances(self, user_id: int) -> WalletBalanceResponse:
        user = self.user_repo.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return WalletBalanceResponse(
            user_id=user.id,
            income_wallet=user.income_wallet,
            personal_wallet=user.personal_wallet,
        )

    def get_ledger(
        self,
        user_id: int,
        limit: int = 50,
        offset: int = 0,
        wallet_kind: Optional[WalletKind] = None,
    ) -> WalletLedgerResponse:
        """사용자 지갑 거래 내역 조회 (최대 100건)"""
        if limit > 100:
            limit = 100

        balance = self.get_balances(user_id)
        entries, total_count = self.wallet_repo.get_user_ledger(
            user_id=user_id, limit=limit, offset=offset, wallet=wallet_kind
        )
        return WalletLedgerResponse(
            balance=balance,
            entries=entries,
            total_count=total_count,
            has_next=offset + limit < total_count,
        )

    def verify_integrity_for_user(
        self, user_id: int
    ) -> List[WalletIntegrityCheckResponse]:
        """지갑별 원장 합계 vs 현재 잔액 검증"""
        results = [
            self.wallet_repo.verify_integrity_for_user(user_id, kind)
            for kind in WalletKind
        ]
        for result in results:
            if result.status != "OK":
                logger.error(
                    f"Wallet integrity mismatch for user {user_id} ({result.wallet.value}): "
                    f"ledger={result.ledger_total} recorded={result.recorded_balance}"
                )
        return results
