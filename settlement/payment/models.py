import enum

from sqlalchemy import BigInteger, Column, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(BigInteger, index=True, nullable=False)     # not checked against the Order Service
    amount = Column(Integer, nullable=False, default=0)
    status = Column(String(16), nullable=False, default=PaymentStatus.PENDING.value)   # pending | success | failed
