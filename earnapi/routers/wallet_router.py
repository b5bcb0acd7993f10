from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from earnapi.core.security import admin_required, get_current_user
from earnapi.deps import get_wallet_service
from earnapi.models.wallet import WalletKind
from earnapi.schemas.user import User as UserSchema
from earnapi.schemas.wallet import (
    WalletBalanceResponse,
    WalletIntegrityCheckResponse,
    WalletLedgerResponse,
)
from earnapi.services.wallet_service import WalletService

router = APIRouter(prefix="/wallets", tags=["wallets"])


@router.get("/me", response_model=WalletBalanceResponse)
def get_my_wallets(
    current_user: UserSchema = Depends(get_current_user),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletBalanceResponse:
    """수입/개인 지갑 잔액"""
    return wallet_service.get_balances(current_user.id)


@router.get("/me/ledger", response_model=WalletLedgerResponse)
def get_my_ledger(
    limit: int = Query(50, ge=1, le=100, description="페이지 크기"),
    offset: int = Query(0, ge=0, description="오프셋"),
    wallet: Optional[WalletKind] = Query(None, description="지갑 종류 필터"),
    current_user: UserSchema = Depends(get_current_user),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletLedgerResponse:
    """지갑 거래 내역 (최신순, 페이징)"""
    return wallet_service.get_ledger(
        current_user.id, limit=limit, offset=offset, wallet_kind=wallet
    )


@router.get(
    "/admin/integrity/{user_id}", response_model=List[WalletIntegrityCheckResponse]
)
def verify_wallet_integrity(
    user_id: int = Path(..., gt=0),
    _: UserSchema = Depends(admin_required),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> List[WalletIntegrityCheckResponse]:
    """원장 합계와 지갑 잔액 일치 여부 (관리자)"""
    return wallet_service.verify_integrity_for_user(user_id)
