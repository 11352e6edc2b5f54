import uuid
from datetime import datetime
from typing import List, Optional
from taskforge.models.tenant import TenantStatus, SubscriptionPlan
from taskforge.schemas.common import CamelModel, MaskedUpdateModel, NonEmptyStr, PositiveInt, Pagination


class TenantSummary(CamelModel):
    id: uuid.UUID
    name: str
    subdomain: str
    status: TenantStatus
    subscription_plan: SubscriptionPlan
    max_users: int
    max_projects: int


class TenantResponse(TenantSummary):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TenantListItem(TenantResponse):
    current_users: int = 0
    current_projects: int = 0


class TenantList(CamelModel):
    tenants: List[TenantListItem]
    total: int
    pagination: Pagination


class TenantUpdate(MaskedUpdateModel):
    name: Optional[NonEmptyStr] = None
    status: Optional[TenantStatus] = None
    subscription_plan: Optional[SubscriptionPlan] = None
    max_users: Optional[PositiveInt] = None
    max_projects: Optional[PositiveInt] = None
