from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from paytrack.db.base import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(
        Integer,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # 0-11 (Jan-Dec)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    paid = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    client = relationship("Client", back_populates="payments")

    __table_args__ = (
        UniqueConstraint("client_id", "month", "year", name="uq_payments_client_month_year"),
        CheckConstraint("month >= 0 AND month <= 11", name="ck_payments_month_range"),
    )
