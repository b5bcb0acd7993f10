from decimal import Decimal

from sqlalchemy import JSON, ForeignKey, Integer, String, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from earnapi.models.base import BigIntId, LedgerModel, Money


class SalaryRecord(LedgerModel):
    """월 급여 지급 기록 - (user_id, month, year) 당 최대 1건"""

    __tablename__ = "salaries"
    __table_args__ = (
        # 이중 지급 방지의 최종 방어선
        UniqueConstraint("user_id", "month", "year", name="uq_salaries_user_month"),
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_salaries_month"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    # {"a_level": 20, "b_level": 15, "c_level": 6, "total": 41, "rule_applied": "..."}
    breakdown: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    rule_applied: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self):
        return f"<SalaryRecord(user_id={self.user_id}, {self.year}-{self.month:02d}, amount={self.amount})>"
