import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    Field,
    TypeAdapter,
    ValidationError,
    computed_field,
)

from campaign_dashboard.models import CreativeType, Status
from campaign_dashboard.services import metrics

Name = Annotated[str, Field(min_length=1)]
Budget = Annotated[Decimal, Field(gt=0, max_digits=10, decimal_places=2)]

_any_url = TypeAdapter(AnyUrl)


def _well_formed_url(value: str) -> str:
    """Accept any absolute URL and keep the submitted text unchanged."""
    try:
        _any_url.validate_python(value)
    except ValidationError as exc:
        raise ValueError("Must be a valid URL") from exc
    return value


Url = Annotated[str, AfterValidator(_well_formed_url)]


class DeliveryOut(BaseModel):
    """Counters shared by every level of the hierarchy, plus derived KPIs."""

    impressions: int
    clicks: int
    spend: Decimal

    @computed_field
    @property
    def cpm(self) -> Decimal:
        return metrics.cpm(self.impressions, self.spend)

    @computed_field
    @property
    def cpc(self) -> Decimal:
        return metrics.cpc(self.clicks, self.spend)


# ---------------------------------------------------------------------------
# Campaigns
# ---------------------------------------------------------------------------


class CampaignCreate(BaseModel):
    name: Name
    status: Status = Status.ACTIVE
    objective: str
    total_budget: Budget
    start_date: date
    end_date: date


class CampaignUpdate(BaseModel):
    name: Name | None = None
    status: Status | None = None
    objective: str | None = None
    total_budget: Budget | None = None
    start_date: date | None = None
    end_date: date | None = None


class CampaignOut(DeliveryOut):
    id: uuid.UUID
    name: str
    status: Status
    objective: str
    total_budget: Decimal
    start_date: date
    end_date: date
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# Ad sets
# ---------------------------------------------------------------------------


class AdSetCreate(BaseModel):
    name: Name
    campaign_id: uuid.UUID
    status: Status = Status.ACTIVE
    daily_budget: Budget
    start_date: date
    end_date: date
    targeting_description: str


class AdSetUpdate(BaseModel):
    name: Name | None = None
    campaign_id: uuid.UUID | None = None
    status: Status | None = None
    daily_budget: Budget | None = None
    start_date: date | None = None
    end_date: date | None = None
    targeting_description: str | None = None


class AdSetOut(DeliveryOut):
    id: uuid.UUID
    name: str
    campaign_id: uuid.UUID
    status: Status
    daily_budget: Decimal
    start_date: date
    end_date: date
    targeting_description: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# Ads
# ---------------------------------------------------------------------------


class AdCreate(BaseModel):
    name: Name
    ad_set_id: uuid.UUID
    status: Status = Status.ACTIVE
    creative_type: CreativeType
    media_url: Url
    headline: str
    body_text: str
    call_to_action: str
    destination_url: Url


class AdUpdate(BaseModel):
    name: Name | None = None
    ad_set_id: uuid.UUID | None = None
    status: Status | None = None
    creative_type: CreativeType | None = None
    media_url: Url | None = None
    headline: str | None = None
    body_text: str | None = None
    call_to_action: str | None = None
    destination_url: Url | None = None


class AdOut(DeliveryOut):
    id: uuid.UUID
    name: str
    ad_set_id: uuid.UUID
    status: Status
    creative_type: CreativeType
    media_url: str
    headline: str
    body_text: str
    call_to_action: str
    destination_url: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DeleteResponse(BaseModel):
    success: bool


class HealthOut(BaseModel):
    status: str
    timestamp: datetime
