from typing import Literal
from pydantic import BaseModel, Field
from renovatepro.models.shared import new_id

PlanInterval = Literal["monthly", "yearly"]


class PricingPlan(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    price: float
    interval: PlanInterval = "monthly"
    features: list[str] = []
    recommended: bool = False


class PricingPlanCreate(BaseModel):
    name: str
    price: float = Field(ge=0)
    interval: PlanInterval = "monthly"
    features: list[str] = []
    recommended: bool = False


class PricingPlanUpdate(BaseModel):
    name: str | None = None
    price: float | None = Field(default=None, ge=0)
    interval: PlanInterval | None = None
    features: list[str] | None = None
    recommended: bool | None = None


class JobTagCreate(BaseModel):
    tag: str = Field(min_length=1)
