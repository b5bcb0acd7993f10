"""
지갑 리포지토리 - 지갑 잔액 변경과 원장 기록

이 파일은 지갑 정산의 핵심 로직을 담당합니다:
1. 사용자 행 잠금 후 잔액 증감 (read-increment-write)
2. 멱등성 보장 (ref_id 중복 처리 방지)
3. 음수 잔액 방지 (NegativeBalanceError, 보정하지 않음)
4. 원장 조회 / 정합성 검증

핵심 특징:
- 이 리포지토리는 트랜잭션을 열거나 커밋하지 않습니다. 호출자의 작업 단위
  (earnapi.database.session.atomic) 안에서만 사용됩니다.
- 잔액 변경과 원장 레코드는 항상 같은 flush에 포함됩니다.
"""

from decimal import Decimal
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import desc, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from earnapi.core.exceptions import (
    ConcurrencyConflictError,
    NegativeBalanceError,
    NotFoundError,
)
from earnapi.models.base import ZERO
from earnapi.models.wallet import WalletKind, WalletTransaction as WalletTransactionModel
from earnapi.repositories.base import BaseRepository
from earnapi.repositories.user_repository import UserRepository
from earnapi.schemas.wallet import (
    WalletCreditResult,
    WalletIntegrityCheckResponse,
    WalletLedgerEntry,
)


class WalletRepository(BaseRepository[WalletTransactionModel, WalletLedgerEntry]):
    """
    지갑 리포지토리 - 지갑 관련 모든 데이터베이스 작업 처리

    주요 기능:
    1. 멱등성 보장 - ref_id를 통한 중복 적립 방지
    2. 동시성 - 사용자 행 잠금 (SELECT ... FOR UPDATE)
    3. 감사 추적 - 모든 잔액 변동을 balance_after와 함께 기록
    """

    def __init__(self, db: Session):
        super().__init__(WalletTransactionModel, WalletLedgerEntry, db)
        self.user_repo = UserRepository(db)

    def get_by_ref_id(self, ref_id: str) -> Optional[WalletTransactionModel]:
        return (
            self.db.query(self.model_class)
            .filter(self.model_class.ref_id == ref_id)
            .first()
        )

    def apply_delta(
        self,
        user_id: int,
        wallet: WalletKind,
        delta: Decimal,
        reason: str,
        ref_id: str,
    ) -> WalletCreditResult:
        """
        지갑 잔액 변경의 핵심 로직

        Args:
            user_id: 대상 사용자 ID
            wallet: 변경할 지갑 (income / personal)
            delta: 변동량 (양수=적립, 음수=차감)
            reason: 거래 사유
            ref_id: 중복 방지용 고유 참조 ID

        Returns:
            WalletCreditResult: 거래 후 잔액 (중복 ref_id면 기록된 잔액, duplicate=True)

        Raises:
            NotFoundError: 사용자가 없음
            NegativeBalanceError: 결과 잔액이 음수
            ConcurrencyConflictError: 같은 ref_id가 동시에 기록됨
        """
        kind = WalletKind(wallet)

        # 중복 처리 방지를 위한 ref_id 체크
        existing_entry = self.get_by_ref_id(ref_id)
        if existing_entry is not None:
            return WalletCreditResult(
                user_id=existing_entry.user_id,
                wallet=WalletKind(existing_entry.wallet),
                delta=existing_entry.delta,
                balance_after=existing_entry.balance_after,
                transaction_id=existing_entry.id,
                duplicate=True,
            )

        user = self.user_repo.get_for_update(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        current_balance = user.get_wallet_balance(kind)
        new_balance = current_balance + delta
        if new_balance < ZERO:
            raise NegativeBalanceError(user_id, kind.value, current_balance, delta)

        user.set_wallet_balance(kind, new_balance)
        ledger_entry = self.model_class(
            user_id=user_id,
            wallet=kind.value,
            delta=delta,
            balance_after=new_balance,
            reason=reason,
            ref_id=ref_id,
        )
        self.db.add(ledger_entry)

        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConcurrencyConflictError(
                details={"ref_id": ref_id, "error": str(e.orig)}
            )

        return WalletCreditResult(
            user_id=user_id,
            wallet=kind,
            delta=delta,
            balance_after=new_balance,
            transaction_id=ledger_entry.id,
        )

    def get_user_ledger(
        self,
        user_id: int,
        limit: int = 50,
        offset: int = 0,
        wallet: Optional[WalletKind] = None,
    ) -> Tuple[List[WalletLedgerEntry], int]:
        """사용자 지갑 원장 조회 (최신순, 페이징)"""
        self._ensure_clean_session()
        query = self.db.query(self.model_class).filter(
            self.model_class.user_id == user_id
        )
        if wallet is not None:
            query = query.filter(self.model_class.wallet == WalletKind(wallet).value)

        total_count = query.count()
        model_instances = (
            query.order_by(desc(self.model_class.id)).limit(limit).offset(offset).all()
        )
        return self._to_schemas(model_instances), total_count

    def verify_integrity_for_user(
        self, user_id: int, wallet: WalletKind
    ) -> WalletIntegrityCheckResponse:
        """
        특정 사용자 지갑의 정합성 검증

        검증 방식:
        1. 원장의 delta 합계 계산
        2. users 테이블의 현재 잔액과 비교
        3. 최신 원장 항목의 balance_after와도 비교
        """
        self._ensure_clean_session()
        kind = WalletKind(wallet)

        user = self.db.get(self.user_repo.model_class, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        ledger_total, entry_count = (
            self.db.query(
                func.coalesce(func.sum(self.model_class.delta), 0),
                func.count(self.model_class.id),
            )
            .filter(
                self.model_class.user_id == user_id,
                self.model_class.wallet == kind.value,
            )
            .one()
        )
        ledger_total = Decimal(str(ledger_total)).quantize(Decimal("0.01"))
        recorded_balance = user.get_wallet_balance(kind)

        latest_entry = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.user_id == user_id,
                self.model_class.wallet == kind.value,
            )
            .order_by(desc(self.model_class.id))
            .first()
        )
        latest_balance = latest_entry.balance_after if latest_entry else ZERO

        status = (
            "OK"
            if ledger_total == recorded_balance == latest_balance
            else "MISMATCH"
        )
        return WalletIntegrityCheckResponse(
            status=status,
            user_id=user_id,
            wallet=kind,
            ledger_total=ledger_total,
            recorded_balance=recorded_balance,
            entry_count=entry_count,
            verified_at=datetime.now(timezone.utc).isoformat(),
        )

