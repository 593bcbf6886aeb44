"""
Pydantic models for civic issues.
These models cover the stored issue record plus the request bodies
accepted by the issue endpoints.
"""

from pydantic import Field, field_validator, model_validator
from datetime import datetime
from typing import Dict, List, Optional
from enum import Enum

from app.core.errors import IntegrityViolation
from app.models.base import CamelModel
from app.utils.timestamps import ensure_utc


class IssueCategory(str, Enum):
    """Fixed set of reportable categories."""
    POTHOLE = "Pothole"
    GARBAGE_OVERFLOW = "Garbage Overflow"
    BROKEN_STREETLIGHT = "Broken Streetlight"
    WATER_LEAKAGE = "Water Leakage"
    DRAINAGE_PROBLEM = "Drainage Problem"
    ROAD_DAMAGE = "Road Damage"
    PUBLIC_TOILET_ISSUE = "Public Toilet Issue"
    TRAFFIC_SIGNAL_PROBLEM = "Traffic Signal Problem"
    ILLEGAL_CONSTRUCTION = "Illegal Construction"
    OTHER = "Other"


DEPARTMENTS: Dict[IssueCategory, str] = {
    IssueCategory.POTHOLE: "Public Works Department",
    IssueCategory.GARBAGE_OVERFLOW: "Sanitation Department",
    IssueCategory.BROKEN_STREETLIGHT: "Electrical Department",
    IssueCategory.WATER_LEAKAGE: "Water Department",
    IssueCategory.DRAINAGE_PROBLEM: "Public Works Department",
    IssueCategory.ROAD_DAMAGE: "Public Works Department",
    IssueCategory.PUBLIC_TOILET_ISSUE: "Sanitation Department",
    IssueCategory.TRAFFIC_SIGNAL_PROBLEM: "Traffic Department",
    IssueCategory.ILLEGAL_CONSTRUCTION: "Urban Planning Department",
    IssueCategory.OTHER: "General Administration",
}


def department_for(category) -> str:
    """
    Department responsible for a category.

    Raises IntegrityViolation for anything outside the fixed set; callers
    are expected to have validated the category already.
    """
    try:
        return DEPARTMENTS[IssueCategory(category)]
    except (ValueError, KeyError):
        raise IntegrityViolation(f"Unknown issue category: {category!r}")


class IssueStatus(str, Enum):
    """
    Issue lifecycle.

    submitted → verified → acknowledged → in-progress → pending-confirmation → resolved
    plus terminal rejected and the reopen edge pending-confirmation → in-progress.
    `resolved` always means the submitting citizen confirmed the fix.
    """
    SUBMITTED = "submitted"
    VERIFIED = "verified"
    ACKNOWLEDGED = "acknowledged"
    IN_PROGRESS = "in-progress"
    PENDING_CONFIRMATION = "pending-confirmation"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class Location(CamelModel):
    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lng: float = Field(..., ge=-180, le=180, description="Longitude in degrees")
    address: str = Field(default="", max_length=500, description="Human readable address")

    class Config:
        frozen = True


class StatusHistoryEntry(CamelModel):
    """Status transition history entry."""
    from_status: Optional[IssueStatus] = Field(None, description="Previous status (None on creation)")
    to_status: IssueStatus = Field(..., description="New status")
    changed_by: str = Field(..., description="User/staff/system that made the change")
    timestamp: datetime = Field(..., description="When change occurred")
    note: Optional[str] = Field(None, description="Optional note explaining the change")

    @field_validator("timestamp", mode="before")
    @classmethod
    def _aware_timestamp(cls, value):
        return ensure_utc(value)


class Issue(CamelModel):
    """
    Stored issue record.
    Owned by the IssueStore; status is only ever written by the LifecycleEngine.
    """
    id: str = Field(..., description="Opaque unique identifier")
    title: str
    description: str = ""
    category: IssueCategory
    location: Location
    photo: Optional[str] = Field(None, description="Photo URL or inline payload (not interpreted)")
    status: IssueStatus = IssueStatus.SUBMITTED
    community_upvotes: int = Field(default=0, ge=0)
    submitted_by: str
    submitted_at: datetime
    assigned_to: Optional[str] = None
    department: str
    resolution_rating: Optional[int] = Field(None, ge=1, le=5)
    is_truly_resolved: bool = False
    feedback_comment: Optional[str] = None
    resolved_at: Optional[datetime] = None
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)

    @field_validator("submitted_at", "resolved_at", mode="before")
    @classmethod
    def _aware_timestamps(cls, value):
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check_invariants(self):
        expected = department_for(self.category)
        if self.department != expected:
            raise IntegrityViolation(
                f"Issue {self.id}: department '{self.department}' does not match "
                f"category '{self.category.value}' (expected '{expected}')"
            )
        if not self.is_truly_resolved and (self.resolution_rating is not None or self.resolved_at is not None):
            raise IntegrityViolation(
                f"Issue {self.id}: resolution data present without citizen confirmation"
            )
        return self


class IssueCreate(CamelModel):
    """
    Body for a new issue submission.
    Status, counters, department and timestamps are system-assigned.
    """
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=4000)
    category: IssueCategory
    location: Location
    photo: Optional[str] = None
    submitted_by: str = Field(..., min_length=1, description="Submitting user id")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Large pothole on Main Street",
                "description": "Deep pothole causing damage to vehicles near the bus stop",
                "category": "Pothole",
                "location": {
                    "lat": 28.6139,
                    "lng": 77.2090,
                    "address": "Main Street, Connaught Place, New Delhi",
                },
                "submittedBy": "citizen1",
            }
        }


class StatusUpdateRequest(CamelModel):
    """
    Staff status change.
    Staff is trusted: any target status is accepted. `resolved` is stored
    as `pending-confirmation` until the citizen confirms.
    """
    status: IssueStatus = Field(..., description="New status value")
    assigned_to: Optional[str] = Field(None, description="Staff member to assign")
    changed_by: Optional[str] = Field(None, description="Staff identifier")
    note: Optional[str] = Field(None, max_length=500)


class ResolutionConfirmRequest(CamelModel):
    # Range is enforced by the lifecycle engine so the error is InvalidRating, not a schema error.
    rating: int = Field(..., description="Resolution rating, 1-5")
    comment: Optional[str] = Field(None, max_length=1000)


class ReopenRequest(CamelModel):
    comment: Optional[str] = Field(None, max_length=1000)


class IssueStats(CamelModel):
    """Dashboard counters."""
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    pending_confirmation: int = 0
    resolved: int = 0
    high_priority: int = 0
