from decimal import Decimal

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from earnapi.models.base import BigIntId, LedgerModel, Money


class TaskCompletion(LedgerModel):
    """작업(영상 시청 등) 완료 기록 - 작업 커미션의 원천"""

    __tablename__ = "task_completions"
    __table_args__ = (
        # 같은 작업은 사용자당 한 번만 보상
        Index("uq_task_completions_user_task", "user_id", "task_ref", unique=True),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id"), nullable=False)
    # 외부 작업 스케줄러가 부여한 작업 식별자 (예: "video:2026-10-19:3")
    task_ref: Mapped[str] = mapped_column(String(100), nullable=False)
    earnings_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    # 완료 시점의 등급 (사후 감사용)
    membership_level: Mapped[str] = mapped_column(String(20), nullable=False)
