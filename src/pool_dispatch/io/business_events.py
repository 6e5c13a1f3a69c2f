# pool_dispatch/io/business_events.py

from dataclasses import dataclass


# Base type for the event log the UI renders (not part of the routing core)
@dataclass
class BizEvent:
    run_id: str
    seq: int  # per-session emission order
    name: str  # stable event name


@dataclass
class DriversPlacedBiz(BizEvent):
    driver_ids: list[str]
    nodes: list[str]


@dataclass
class DriverRemovedBiz(BizEvent):
    driver_id: str
    node: str


@dataclass
class RiderPlacedBiz(BizEvent):
    rider_id: str
    pickup: str


@dataclass
class DriverMatchedBiz(BizEvent):
    rider_id: str
    driver_id: str
    distance: float
    radius: int
    fallback_used: bool
    visited: int  # nodes finalized by the search


@dataclass
class NoMatchBiz(BizEvent):
    rider_id: str
    reason: str


@dataclass
class PoolRoutedBiz(BizEvent):
    rider_ids: list[str]
    driver_id: str
    order: list[str]
    destination: str
    cost: float
    path: list[str]


@dataclass
class NoPoolRouteBiz(BizEvent):
    rider_ids: list[str]
    destination: str
    reason: str


@dataclass
class SessionResetBiz(BizEvent):
    drivers: int
    riders: int
