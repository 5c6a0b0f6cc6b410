"""Hierarchy store: Campaign -> AdSet -> Ad.

Owns the cross-entity rules of the dashboard:

* an ad set may only point at an existing campaign, and an ad at an
  existing ad set (checked on create and whenever the reference changes);
* deleting an ad set soft-deletes every ad underneath it in the same
  transaction, children first;
* campaigns are hard-deleted and never cascade.  The foreign key from
  ``ad_sets`` rejects removal of a campaign that still owns ad-set rows.

Field shapes (names, budgets, URLs, enum values) are validated by the
request schemas before anything reaches this module.

Every public method returns a ``StoreResult``.  Internal exceptions from
``services.exceptions`` never cross that boundary.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from campaign_dashboard.models import Ad, AdSet, Campaign, Status
from campaign_dashboard.schemas import (
    AdCreate,
    AdSetCreate,
    AdSetUpdate,
    AdUpdate,
    CampaignCreate,
    CampaignUpdate,
)
from campaign_dashboard.services.exceptions import (
    HierarchyError,
    RecordNotFound,
    ReferentialViolation,
    StorageFailure,
)
from campaign_dashboard.services.results import StoreResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

CAMPAIGN_FIELDS = ("name", "status", "objective", "total_budget", "start_date", "end_date")
AD_SET_FIELDS = (
    "name",
    "campaign_id",
    "status",
    "daily_budget",
    "start_date",
    "end_date",
    "targeting_description",
)
AD_FIELDS = (
    "name",
    "ad_set_id",
    "status",
    "creative_type",
    "media_url",
    "headline",
    "body_text",
    "call_to_action",
    "destination_url",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _column_values(
    payload: BaseModel | Mapping[str, Any], allowed: tuple[str, ...]
) -> dict[str, Any]:
    """Pick the supplied, non-null fields of a request payload."""
    if isinstance(payload, BaseModel):
        raw = payload.model_dump(exclude_unset=True, exclude_none=True)
    else:
        raw = {key: value for key, value in payload.items() if value is not None}

    values: dict[str, Any] = {}
    for key in allowed:
        if key not in raw:
            continue
        value = raw[key]
        if isinstance(value, float):
            value = Decimal(str(value))
        values[key] = value
    return values


class HierarchyStore:
    """Validated reads and writes over campaigns, ad sets and ads.

    One store wraps one session, i.e. one request.  Nothing is shared
    between instances.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Boundary
    # ------------------------------------------------------------------

    def _run(self, operation: str, fn: Callable[[], T]) -> StoreResult[T]:
        try:
            return StoreResult.success(fn())
        except RecordNotFound as exc:
            self.db.rollback()
            return StoreResult.from_error(exc)
        except ReferentialViolation as exc:
            self.db.rollback()
            logger.warning("%s rejected: %s", operation, exc)
            return StoreResult.from_error(exc)
        except HierarchyError as exc:
            self.db.rollback()
            logger.error("%s failed: %s", operation, exc)
            return StoreResult.from_error(exc)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("%s failed in the storage layer", operation)
            return StoreResult.from_error(
                StorageFailure(str(exc.orig if getattr(exc, "orig", None) else exc))
            )

    # ------------------------------------------------------------------
    # Parent resolution
    # ------------------------------------------------------------------

    def _require_campaign(self, campaign_id: uuid.UUID) -> Campaign:
        campaign = self.db.get(Campaign, campaign_id)
        if campaign is None:
            raise ReferentialViolation.for_parent("Campaign", campaign_id)
        return campaign

    def _lock_ad_set(self, ad_set_id: uuid.UUID) -> AdSet | None:
        # Row lock serialises child writes against delete_ad_set on the same parent
        return self.db.get(AdSet, ad_set_id, with_for_update=True, populate_existing=True)

    def _require_ad_set(self, ad_set_id: uuid.UUID) -> AdSet:
        ad_set = self._lock_ad_set(ad_set_id)
        if ad_set is None:
            raise ReferentialViolation.for_parent("AdSet", ad_set_id)
        return ad_set

    @staticmethod
    def _check_live_parent(ad_set: AdSet, ad_status: Status) -> None:
        # A Deleted ad set may only hold Deleted ads
        if ad_set.status is Status.DELETED and ad_status is not Status.DELETED:
            raise ReferentialViolation.for_parent("AdSet", ad_set.id, reason="is deleted")

    def _recheck_live_parent(self, ad_set: AdSet, ad_status: Status) -> None:
        """Re-read the parent after the child write is flushed.

        Catches a delete_ad_set that committed between the first check and
        the write, on backends where the row lock is a no-op (SQLite).
        """
        self.db.refresh(ad_set)
        self._check_live_parent(ad_set, ad_status)

    def _commit(self, record: T) -> T:
        self.db.commit()
        self.db.refresh(record)
        return record

    # ------------------------------------------------------------------
    # Campaigns
    # ------------------------------------------------------------------

    def create_campaign(self, payload: CampaignCreate) -> StoreResult[Campaign]:
        def _create() -> Campaign:
            now = _utcnow()
            campaign = Campaign(
                **_column_values(payload, CAMPAIGN_FIELDS),
                impressions=0,
                clicks=0,
                spend=Decimal("0.00"),
                created_at=now,
                updated_at=now,
            )
            self.db.add(campaign)
            self._commit(campaign)
            logger.info("Created campaign %s", campaign.id)
            return campaign

        return self._run("create_campaign", _create)

    def get_campaigns(self) -> StoreResult[list[Campaign]]:
        return self._run(
            "get_campaigns",
            lambda: list(
                self.db.execute(select(Campaign).order_by(Campaign.created_at, Campaign.id))
                .scalars()
                .all()
            ),
        )

    def get_campaign_by_id(self, campaign_id: uuid.UUID) -> StoreResult[Campaign]:
        def _get() -> Campaign:
            campaign = self.db.get(Campaign, campaign_id)
            if campaign is None:
                raise RecordNotFound(f"Campaign with id {campaign_id} not found")
            return campaign

        return self._run("get_campaign_by_id", _get)

    def update_campaign(
        self, campaign_id: uuid.UUID, payload: CampaignUpdate | Mapping[str, Any]
    ) -> StoreResult[Campaign]:
        def _update() -> Campaign:
            campaign = self.db.get(Campaign, campaign_id)
            if campaign is None:
                raise RecordNotFound(f"Campaign with id {campaign_id} not found")
            for key, value in _column_values(payload, CAMPAIGN_FIELDS).items():
                setattr(campaign, key, value)
            campaign.updated_at = _utcnow()
            self._commit(campaign)
            logger.info("Updated campaign %s", campaign_id)
            return campaign

        return self._run("update_campaign", _update)

    def delete_campaign(self, campaign_id: uuid.UUID) -> StoreResult[bool]:
        """Hard delete.  Child ad sets are not touched."""

        def _delete() -> bool:
            result = self.db.execute(delete(Campaign).where(Campaign.id == campaign_id))
            self.db.commit()
            removed = result.rowcount > 0
            if removed:
                logger.info("Deleted campaign %s", campaign_id)
            return removed

        return self._run("delete_campaign", _delete)

    # ------------------------------------------------------------------
    # Ad sets
    # ------------------------------------------------------------------

    def create_ad_set(self, payload: AdSetCreate) -> StoreResult[AdSet]:
        def _create() -> AdSet:
            values = _column_values(payload, AD_SET_FIELDS)
            self._require_campaign(values["campaign_id"])
            now = _utcnow()
            ad_set = AdSet(
                **values,
                impressions=0,
                clicks=0,
                spend=Decimal("0.00"),
                created_at=now,
                updated_at=now,
            )
            self.db.add(ad_set)
            self._commit(ad_set)
            logger.info("Created ad set %s under campaign %s", ad_set.id, ad_set.campaign_id)
            return ad_set

        return self._run("create_ad_set", _create)

    def get_ad_sets(self) -> StoreResult[list[AdSet]]:
        return self._run(
            "get_ad_sets",
            lambda: list(
                self.db.execute(select(AdSet).order_by(AdSet.created_at, AdSet.id)).scalars().all()
            ),
        )

    def get_ad_sets_by_campaign(self, campaign_id: uuid.UUID) -> StoreResult[list[AdSet]]:
        """Empty for a campaign without ad sets and for an unknown campaign alike."""
        return self._run(
            "get_ad_sets_by_campaign",
            lambda: list(
                self.db.execute(
                    select(AdSet)
                    .where(AdSet.campaign_id == campaign_id)
                    .order_by(AdSet.created_at, AdSet.id)
                )
                .scalars()
                .all()
            ),
        )

    def get_ad_set_by_id(self, ad_set_id: uuid.UUID) -> StoreResult[AdSet]:
        def _get() -> AdSet:
            ad_set = self.db.get(AdSet, ad_set_id)
            if ad_set is None:
                raise RecordNotFound(f"AdSet with id {ad_set_id} not found")
            return ad_set

        return self._run("get_ad_set_by_id", _get)

    def update_ad_set(
        self, ad_set_id: uuid.UUID, payload: AdSetUpdate | Mapping[str, Any]
    ) -> StoreResult[AdSet]:
        """Partial update.  An update carrying no fields is reported as absent."""

        def _update() -> AdSet:
            values = _column_values(payload, AD_SET_FIELDS)
            if not values:
                raise RecordNotFound(f"No fields to update for AdSet {ad_set_id}")
            ad_set = self._lock_ad_set(ad_set_id)
            if ad_set is None:
                raise RecordNotFound(f"AdSet with id {ad_set_id} not found")
            if "campaign_id" in values and values["campaign_id"] != ad_set.campaign_id:
                self._require_campaign(values["campaign_id"])
            now = _utcnow()
            if values.get("status") is Status.DELETED:
                # Status edits reach the same end state as delete_ad_set
                self._cascade_to_ads(ad_set_id, now, only_live=True)
            for key, value in values.items():
                setattr(ad_set, key, value)
            ad_set.updated_at = now
            self._commit(ad_set)
            logger.info("Updated ad set %s", ad_set_id)
            return ad_set

        return self._run("update_ad_set", _update)

    def _cascade_to_ads(self, ad_set_id: uuid.UUID, now: datetime, *, only_live: bool) -> int:
        stmt = update(Ad).where(Ad.ad_set_id == ad_set_id)
        if only_live:
            stmt = stmt.where(Ad.status != Status.DELETED)
        result = self.db.execute(
            stmt.values(status=Status.DELETED, updated_at=now),
            execution_options={"synchronize_session": "evaluate"},
        )
        return result.rowcount

    def delete_ad_set(self, ad_set_id: uuid.UUID) -> StoreResult[bool]:
        """Soft-delete an ad set and every ad under it in one transaction.

        Children are updated before the parent so that no interleaving can
        observe a Deleted ad set with live ads.  The child sweep runs again
        after the parent update to pick up ads committed in between.
        """

        def _delete() -> bool:
            ad_set = self._lock_ad_set(ad_set_id)
            if ad_set is None:
                return False
            now = _utcnow()
            cascaded = self._cascade_to_ads(ad_set_id, now, only_live=False)
            ad_set.status = Status.DELETED
            ad_set.updated_at = now
            self.db.flush()
            cascaded += self._cascade_to_ads(ad_set_id, now, only_live=True)
            self.db.commit()
            logger.info("Deleted ad set %s (cascaded to %d ads)", ad_set_id, cascaded)
            return True

        return self._run("delete_ad_set", _delete)

    # ------------------------------------------------------------------
    # Ads
    # ------------------------------------------------------------------

    def create_ad(self, payload: AdCreate) -> StoreResult[Ad]:
        def _create() -> Ad:
            values = _column_values(payload, AD_FIELDS)
            ad_set = self._require_ad_set(values["ad_set_id"])
            self._check_live_parent(ad_set, values.get("status", Status.ACTIVE))
            now = _utcnow()
            ad = Ad(
                **values,
                impressions=0,
                clicks=0,
                spend=Decimal("0.00"),
                created_at=now,
                updated_at=now,
            )
            self.db.add(ad)
            try:
                self.db.flush()
            except IntegrityError as exc:
                # Parent removed between the check and the insert
                raise ReferentialViolation.for_parent("AdSet", values["ad_set_id"]) from exc
            self._recheck_live_parent(ad_set, values.get("status", Status.ACTIVE))
            self._commit(ad)
            logger.info("Created ad %s under ad set %s", ad.id, ad.ad_set_id)
            return ad

        return self._run("create_ad", _create)

    def get_ads(self) -> StoreResult[list[Ad]]:
        return self._run(
            "get_ads",
            lambda: list(
                self.db.execute(select(Ad).order_by(Ad.created_at, Ad.id)).scalars().all()
            ),
        )

    def get_ads_by_ad_set(self, ad_set_id: uuid.UUID) -> StoreResult[list[Ad]]:
        """Empty for an ad set without ads and for an unknown ad set alike."""
        return self._run(
            "get_ads_by_ad_set",
            lambda: list(
                self.db.execute(
                    select(Ad).where(Ad.ad_set_id == ad_set_id).order_by(Ad.created_at, Ad.id)
                )
                .scalars()
                .all()
            ),
        )

    def get_ad_by_id(self, ad_id: uuid.UUID) -> StoreResult[Ad]:
        def _get() -> Ad:
            ad = self.db.get(Ad, ad_id)
            if ad is None:
                raise RecordNotFound(f"Ad with id {ad_id} not found")
            return ad

        return self._run("get_ad_by_id", _get)

    def update_ad(
        self, ad_id: uuid.UUID, payload: AdUpdate | Mapping[str, Any]
    ) -> StoreResult[Ad]:
        def _update() -> Ad:
            values = _column_values(payload, AD_FIELDS)
            ad = self.db.get(Ad, ad_id)
            if ad is None:
                raise RecordNotFound(f"Ad with id {ad_id} not found")
            ad_set = self._require_ad_set(values.get("ad_set_id", ad.ad_set_id))
            self._check_live_parent(ad_set, values.get("status", ad.status))
            for key, value in values.items():
                setattr(ad, key, value)
            ad.updated_at = _utcnow()
            self.db.flush()
            self._recheck_live_parent(ad_set, ad.status)
            self._commit(ad)
            logger.info("Updated ad %s", ad_id)
            return ad

        return self._run("update_ad", _update)

    def delete_ad(self, ad_id: uuid.UUID) -> StoreResult[bool]:
        """Soft delete.  Deleting an already Deleted ad still succeeds."""

        def _delete() -> bool:
            ad = self.db.get(Ad, ad_id)
            if ad is None:
                return False
            ad.status = Status.DELETED
            ad.updated_at = _utcnow()
            self.db.commit()
            logger.info("Deleted ad %s", ad_id)
            return True

        return self._run("delete_ad", _delete)
