from sqlalchemy import Integer, String, ForeignKey, Float, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from datetime import datetime
from typing import List, Optional
from .database import Base

EXPENSE_CATEGORIES = (
    "groceries", "dining", "entertainment", "bills", "transport", "health", "education",
    "housing", "pets", "gifts", "travel", "beauty", "other", "transfer",
)
REVENUE_CATEGORIES = ("salary", "freelance", "investment", "gift", "other")

class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    pix_key: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

class Group(Base):
    __tablename__ = "groups"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    icon: Mapped[str] = mapped_column(String(40), default="users")
    memberships: Mapped[List["GroupMember"]] = relationship(cascade="all, delete-orphan", order_by="GroupMember.id")
    transactions: Mapped[List["Transaction"]] = relationship(cascade="all, delete-orphan")
    goals: Mapped[List["Goal"]] = relationship(cascade="all, delete-orphan")

    @property
    def members(self) -> List[User]:
        return [m.user for m in self.memberships]

    @property
    def is_personal(self) -> bool:
        return len(self.memberships) == 1

class GroupMember(Base):
    __tablename__ = "group_members"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    user: Mapped[User] = relationship()
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_member"),)

class Transaction(Base):
    __tablename__ = "transactions"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id", ondelete="CASCADE"), index=True)
    description: Mapped[str] = mapped_column(String(500), default="")
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, default="other")
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    receipt_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    payers: Mapped[List["TransactionPayer"]] = relationship(cascade="all, delete-orphan", order_by="TransactionPayer.id")
    participants: Mapped[List["TransactionParticipant"]] = relationship(cascade="all, delete-orphan", order_by="TransactionParticipant.id")

    @property
    def total_paid(self) -> float:
        return sum(p.amount for p in self.payers)

    @property
    def participant_ids(self) -> List[int]:
        return [p.user_id for p in self.participants]

class TransactionPayer(Base):
    __tablename__ = "transaction_payers"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    transaction_id: Mapped[int] = mapped_column(ForeignKey("transactions.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    amount: Mapped[float] = mapped_column(Float, nullable=False)

class TransactionParticipant(Base):
    __tablename__ = "transaction_participants"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    transaction_id: Mapped[int] = mapped_column(ForeignKey("transactions.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))

class Goal(Base):
    __tablename__ = "goals"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    target_amount: Mapped[float] = mapped_column(Float, nullable=False)
    contributions: Mapped[List["Contribution"]] = relationship(cascade="all, delete-orphan", order_by="Contribution.date")

class Contribution(Base):
    __tablename__ = "contributions"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    goal_id: Mapped[int] = mapped_column(ForeignKey("goals.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

class Revenue(Base):
    __tablename__ = "revenues"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    description: Mapped[str] = mapped_column(String(500), default="")
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    category: Mapped[str] = mapped_column(String(20), nullable=False, default="other")
    received: Mapped[bool] = mapped_column(Boolean, default=False)
