"""
Pydantic schemas for the admin area: dashboard, user details, role toggling and statistics.
"""

from pydantic import BaseModel, Field
from typing import Dict, List
from marketplace.models.user import UserRole
from marketplace.schemas.property import PropertyResponse
from marketplace.schemas.request import RequestResponse
from marketplace.schemas.user import UserResponse


class DashboardResponse(BaseModel):
    """Headline counters and recent activity."""

    total_users: int
    total_properties: int
    total_requests: int
    total_messages: int
    pending_requests: int
    available_properties: int
    sold_properties: int
    recent_properties: List[PropertyResponse]
    recent_requests: List[RequestResponse]


class UserDetailsResponse(BaseModel):
    """A user with their listings and filed requests."""

    user: UserResponse
    properties: List[PropertyResponse]
    requests: List[RequestResponse]


class RoleToggleRequest(BaseModel):
    """Role to grant if absent or revoke if present."""

    role: UserRole = Field(..., examples=["Agent"])


class MonthlyCount(BaseModel):
    month: str = Field(..., examples=["2024-05"])
    count: int


class TopRequestedProperty(BaseModel):
    property_id: str
    title: str
    request_count: int


class StatisticsResponse(BaseModel):
    """Aggregates for the statistics page."""

    properties_by_status: Dict[str, int]
    requests_by_status: Dict[str, int]
    users_by_role: Dict[str, int]
    monthly_requests: List[MonthlyCount]
    monthly_messages: List[MonthlyCount]
    top_requested_properties: List[TopRequestedProperty]
