"""Derived delivery metrics for campaigns, ad sets and ads.

CPM and CPC are always computed from the counters on the record at read
time and are never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

_ZERO = Decimal("0")
_THOUSAND = Decimal("1000")


class SupportsDelivery(Protocol):
    impressions: int
    clicks: int
    spend: Decimal


@dataclass(frozen=True)
class DeliveryMetrics:
    cpm: Decimal
    cpc: Decimal


def _to_decimal(value) -> Decimal:
    if value is None:
        return _ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def cpm(impressions: int, spend) -> Decimal:
    """Cost per thousand impressions, 0 when nothing was served."""
    if not impressions or impressions <= 0:
        return _ZERO
    return (_to_decimal(spend) / Decimal(impressions)) * _THOUSAND


def cpc(clicks: int, spend) -> Decimal:
    """Cost per click, 0 when nothing was clicked."""
    if not clicks or clicks <= 0:
        return _ZERO
    return _to_decimal(spend) / Decimal(clicks)


def compute_metrics(record: SupportsDelivery) -> DeliveryMetrics:
    return DeliveryMetrics(
        cpm=cpm(record.impressions, record.spend),
        cpc=cpc(record.clicks, record.spend),
    )
