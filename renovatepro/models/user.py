from datetime import date
from typing import Literal
from pydantic import BaseModel, Field
from renovatepro.models.shared import new_id

ContractorPlan = Literal["Pro Monthly", "Pro Yearly", "Free Trial"]
ContractorStatus = Literal["Active", "Inactive"]
AdminRole = Literal["Super Admin", "Sub Admin"]


class Contractor(BaseModel):
    id: str = Field(default_factory=new_id)
    first_name: str
    last_name: str
    company: str = ""
    phone: str = ""
    email: str
    plan: ContractorPlan = "Pro Monthly"
    status: ContractorStatus = "Active"
    join_date: str = Field(default_factory=lambda: date.today().isoformat())


class ContractorCreate(BaseModel):
    first_name: str
    last_name: str
    company: str = ""
    phone: str = ""
    email: str
    plan: ContractorPlan = "Pro Monthly"
    status: ContractorStatus = "Active"


class ContractorUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    company: str | None = None
    phone: str | None = None
    email: str | None = None
    plan: ContractorPlan | None = None
    status: ContractorStatus | None = None


class AdminPermissions(BaseModel):
    manage_contractors: bool = False
    manage_admins: bool = False


class AdminUser(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    email: str
    role: AdminRole = "Sub Admin"
    permissions: AdminPermissions = AdminPermissions()


class AdminUserCreate(BaseModel):
    name: str
    email: str
    role: AdminRole = "Sub Admin"
    permissions: AdminPermissions = AdminPermissions()


class AdminUserUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    role: AdminRole | None = None
    permissions: AdminPermissions | None = None


class Profile(BaseModel):
    """Display identity of the signed-in contractor or admin."""
    name: str
    image_url: str


class ProfileUpdate(BaseModel):
    name: str | None = None
    image_url: str | None = None
