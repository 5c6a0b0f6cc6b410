import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from campaign_dashboard.db import get_db
from campaign_dashboard.schemas import (
    AdCreate,
    AdOut,
    AdSetCreate,
    AdSetOut,
    AdSetUpdate,
    AdUpdate,
    CampaignCreate,
    CampaignOut,
    CampaignUpdate,
    DeleteResponse,
)
from campaign_dashboard.services.hierarchy import HierarchyStore
from campaign_dashboard.services.results import Outcome, StoreResult

router = APIRouter(tags=["hierarchy"])

_STATUS_BY_OUTCOME = {
    Outcome.NOT_FOUND: 404,
    Outcome.REFERENTIAL_VIOLATION: 422,
    Outcome.STORAGE_FAILURE: 500,
}


def get_store(db: Session = Depends(get_db)) -> HierarchyStore:
    return HierarchyStore(db)


def _unwrap(result: StoreResult):
    """Translate a store result into a response body or an HTTP error."""
    if result.ok:
        return result.value
    raise HTTPException(status_code=_STATUS_BY_OUTCOME[result.outcome], detail=result.error)


def _deleted(result: StoreResult[bool]) -> DeleteResponse:
    return DeleteResponse(success=bool(_unwrap(result)))


# ---------------------------------------------------------------------------
# Campaigns
# ---------------------------------------------------------------------------


@router.post("/campaigns", response_model=CampaignOut, tags=["campaigns"])
def create_campaign(payload: CampaignCreate, store: HierarchyStore = Depends(get_store)):
    return _unwrap(store.create_campaign(payload))


@router.get("/campaigns", response_model=list[CampaignOut], tags=["campaigns"])
def list_campaigns(store: HierarchyStore = Depends(get_store)):
    return _unwrap(store.get_campaigns())


@router.get("/campaigns/{campaign_id}", response_model=CampaignOut, tags=["campaigns"])
def get_campaign(campaign_id: uuid.UUID, store: HierarchyStore = Depends(get_store)):
    return _unwrap(store.get_campaign_by_id(campaign_id))


@router.patch("/campaigns/{campaign_id}", response_model=CampaignOut, tags=["campaigns"])
def update_campaign(
    campaign_id: uuid.UUID, payload: CampaignUpdate, store: HierarchyStore = Depends(get_store)
):
    return _unwrap(store.update_campaign(campaign_id, payload))


@router.delete("/campaigns/{campaign_id}", response_model=DeleteResponse, tags=["campaigns"])
def delete_campaign(campaign_id: uuid.UUID, store: HierarchyStore = Depends(get_store)):
    return _deleted(store.delete_campaign(campaign_id))


@router.get(
    "/campaigns/{campaign_id}/ad-sets",
    response_model=list[AdSetOut],
    tags=["ad-sets"],
)
def list_campaign_ad_sets(campaign_id: uuid.UUID, store: HierarchyStore = Depends(get_store)):
    return _unwrap(store.get_ad_sets_by_campaign(campaign_id))


# ---------------------------------------------------------------------------
# Ad sets
# ---------------------------------------------------------------------------


@router.post("/ad-sets", response_model=AdSetOut, tags=["ad-sets"])
def create_ad_set(payload: AdSetCreate, store: HierarchyStore = Depends(get_store)):
    return _unwrap(store.create_ad_set(payload))


@router.get("/ad-sets", response_model=list[AdSetOut], tags=["ad-sets"])
def list_ad_sets(store: HierarchyStore = Depends(get_store)):
    return _unwrap(store.get_ad_sets())


@router.get("/ad-sets/{ad_set_id}", response_model=AdSetOut, tags=["ad-sets"])
def get_ad_set(ad_set_id: uuid.UUID, store: HierarchyStore = Depends(get_store)):
    return _unwrap(store.get_ad_set_by_id(ad_set_id))


@router.patch("/ad-sets/{ad_set_id}", response_model=AdSetOut, tags=["ad-sets"])
def update_ad_set(
    ad_set_id: uuid.UUID, payload: AdSetUpdate, store: HierarchyStore = Depends(get_store)
):
    return _unwrap(store.update_ad_set(ad_set_id, payload))


@router.delete("/ad-sets/{ad_set_id}", response_model=DeleteResponse, tags=["ad-sets"])
def delete_ad_set(ad_set_id: uuid.UUID, store: HierarchyStore = Depends(get_store)):
    return _deleted(store.delete_ad_set(ad_set_id))


@router.get("/ad-sets/{ad_set_id}/ads", response_model=list[AdOut], tags=["ads"])
def list_ad_set_ads(ad_set_id: uuid.UUID, store: HierarchyStore = Depends(get_store)):
    return _unwrap(store.get_ads_by_ad_set(ad_set_id))


# ---------------------------------------------------------------------------
# Ads
# ---------------------------------------------------------------------------


@router.post("/ads", response_model=AdOut, tags=["ads"])
def create_ad(payload: AdCreate, store: HierarchyStore = Depends(get_store)):
    return _unwrap(store.create_ad(payload))


@router.get("/ads", response_model=list[AdOut], tags=["ads"])
def list_ads(store: HierarchyStore = Depends(get_store)):
    return _unwrap(store.get_ads())


@router.get("/ads/{ad_id}", response_model=AdOut, tags=["ads"])
def get_ad(ad_id: uuid.UUID, store: HierarchyStore = Depends(get_store)):
    return _unwrap(store.get_ad_by_id(ad_id))


@router.patch("/ads/{ad_id}", response_model=AdOut, tags=["ads"])
def update_ad(ad_id: uuid.UUID, payload: AdUpdate, store: HierarchyStore = Depends(get_store)):
    return _unwrap(store.update_ad(ad_id, payload))


@router.delete("/ads/{ad_id}", response_model=DeleteResponse, tags=["ads"])
def delete_ad(ad_id: uuid.UUID, store: HierarchyStore = Depends(get_store)):
    return _deleted(store.delete_ad(ad_id))
