from sqlalchemy import CheckConstraint, Column, Integer, String
from sqlalchemy.orm import relationship

from paytrack.db.base import Base


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    monthly_amount = Column(Integer, nullable=False)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)

    payments = relationship(
        "Payment",
        back_populates="client",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("monthly_amount > 0", name="ck_clients_monthly_amount_positive"),
    )

    @property
    def annual_amount(self) -> int:
        return self.monthly_amount * 12
