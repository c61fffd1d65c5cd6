from pydantic import AfterValidator, BaseModel, Field, ConfigDict, EmailStr
from typing import Annotated, List, Optional, Literal
from datetime import datetime, timezone

ExpenseCategory = Literal[
    "groceries", "dining", "entertainment", "bills", "transport", "health", "education",
    "housing", "pets", "gifts", "travel", "beauty", "other", "transfer",
]
RevenueCategory = Literal["salary", "freelance", "investment", "gift", "other"]

def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # stored dates are naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

NaiveUTCDatetime = Annotated[datetime, AfterValidator(to_naive_utc)]

class UserCreate(BaseModel):
    name: str
    email: EmailStr
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    pix_key: Optional[str] = None

class UserOut(BaseModel):
    id: int
    name: str
    email: EmailStr
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    pix_key: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)

class GroupCreate(BaseModel):
    name: str
    icon: str = "users"
    member_ids: List[int] = []

class GroupOut(BaseModel):
    id: int
    name: str
    icon: str
    members: List[UserOut]
    is_personal: bool
    model_config = ConfigDict(from_attributes=True)

class AddMember(BaseModel):
    user_id: int

class PayerIn(BaseModel):
    user_id: int
    amount: float

class PayerOut(BaseModel):
    user_id: int
    amount: float
    model_config = ConfigDict(from_attributes=True)

class ExpenseIn(BaseModel):
    description: str = ""
    amount: float
    category: ExpenseCategory = "other"
    date: Optional[NaiveUTCDatetime] = None
    payers: List[PayerIn] = []
    participant_ids: List[int] = Field(default=[], description="Empty means every group member")
    receipt_url: Optional[str] = None

class ExpenseOut(BaseModel):
    id: int
    group_id: int
    description: str
    amount: float
    category: str
    date: datetime
    payers: List[PayerOut]
    participant_ids: List[int]
    receipt_url: Optional[str] = None
    total_paid: float
    outstanding: float

class BalanceOut(BaseModel):
    user: UserOut
    amount: float
    status: Literal["creditor", "debtor", "settled"]

class MemberSummaryOut(BaseModel):
    user: UserOut
    paid_total: float
    share_total: float
    net: float

class BalanceSummaryOut(BaseModel):
    group_id: int
    is_personal: bool
    total_spent: float
    members: List[MemberSummaryOut]

class DebtOut(BaseModel):
    from_user: UserOut = Field(serialization_alias="from")
    to_user: UserOut = Field(serialization_alias="to")
    amount: float

class SettlementIn(BaseModel):
    debtor_id: int
    creditor_id: int
    amount: float
    receipt_url: Optional[str] = None

class GoalCreate(BaseModel):
    name: str
    target_amount: float = Field(gt=0)

class GoalOut(BaseModel):
    id: int
    group_id: int
    name: str
    target_amount: float
    total_contributed: float
    remaining: float
    percent: float
    reached: bool

class ContributionIn(BaseModel):
    user_id: int
    amount: float = Field(gt=0)
    date: Optional[NaiveUTCDatetime] = None

class ContributionOut(BaseModel):
    id: int
    goal_id: int
    user_id: int
    amount: float
    date: datetime
    model_config = ConfigDict(from_attributes=True)

class ContributionResult(BaseModel):
    contribution: ContributionOut
    goal: GoalOut
    reached_now: bool

class RevenueIn(BaseModel):
    description: str = ""
    amount: float = Field(gt=0)
    date: NaiveUTCDatetime
    category: RevenueCategory = "other"
    received: bool = False

class RevenueOut(BaseModel):
    id: int
    user_id: int
    description: str
    amount: float
    date: datetime
    category: str
    received: bool
    model_config = ConfigDict(from_attributes=True)

class RevenueSummaryOut(BaseModel):
    received: List[RevenueOut]
    forecast: List[RevenueOut]
    total_received: float
    total_forecast: float

class CategoryTotal(BaseModel):
    category: str
    amount: float
    percentage: float

class MemberTotal(BaseModel):
    user_id: int
    amount: float

class ReportOut(BaseModel):
    total: float
    count: int
    average: float
    trend_percent: float
    by_category: List[CategoryTotal]
    by_member: List[MemberTotal]
