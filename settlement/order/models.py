from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    item = Column(String(255), nullable=False, default="")
    amount = Column(Integer, nullable=False, default=0)
    paid = Column(Boolean, nullable=False, default=False)    # set by the settlement callback
