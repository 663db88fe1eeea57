"""
Pydantic schemas for AuraGold Clinic.

Defines the safety and transparency data contracts shared with the
UI collaborator, plus request/response models for all API endpoints.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Tuple, Dict, Any
from uuid import uuid4

from pydantic import BaseModel, Field, ConfigDict, model_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Enums
# =============================================================================

class InterlockType(str, Enum):
    """Outcome tag of a single safety interlock."""
    CLEARED = "cleared"
    WARNING = "warning"
    BLOCKED = "blocked"


class SessionPhase(str, Enum):
    """Lifecycle phase of the staff session."""
    UNAUTHENTICATED = "unauthenticated"
    ACTIVE = "active"
    WARNING = "warning"
    EXPIRED = "expired"


class AuditEventType(str, Enum):
    """Audited staff authentication events."""
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILURE = "LOGIN_FAILURE"
    LOGOUT = "LOGOUT"
    SESSION_TIMEOUT = "SESSION_TIMEOUT"


class UserRole(str, Enum):
    """Who triggered an audited event."""
    PATIENT = "patient"
    STAFF = "staff"
    SYSTEM = "system"


class AuditOutcome(str, Enum):
    """Result of an audited action."""
    SUCCESS = "success"
    FAILURE = "failure"


class ConditionCategory(str, Enum):
    """Questionnaire grouping of a health condition."""
    MEDICAL = "medical"
    MEDICATION = "medication"
    ALLERGY = "allergy"
    LIFESTYLE = "lifestyle"
    LAB = "lab"


class ConditionSeverity(str, Enum):
    """How a condition usually weighs on treatment eligibility."""
    ABSOLUTE = "absolute"
    CAUTION = "caution"


# =============================================================================
# Safety & Transparency
# =============================================================================

class SafetyStatus(BaseModel):
    """Contraindication screening result for one treatment."""

    treatment: Optional[str] = Field(default=None, description="Screened treatment name")
    is_blocked: bool = Field(default=False)
    blocked_reasons: List[str] = Field(default_factory=list)
    has_cautions: bool = Field(default=False)
    caution_reasons: List[str] = Field(default_factory=list)
    requires_lab_work: bool = Field(default=False)
    required_lab_tests: List[str] = Field(default_factory=list)
    is_conditional: bool = Field(
        default=False,
        description="Recommendation depends on pending lab results"
    )
    conditional_message: Optional[str] = Field(default=None)
    explainable_reason: Optional[str] = Field(
        default=None,
        description="Patient-facing sentence explaining a block"
    )

    @model_validator(mode="after")
    def flags_have_reasons(self) -> "SafetyStatus":
        pairs = (
            ("is_blocked", self.is_blocked, self.blocked_reasons),
            ("has_cautions", self.has_cautions, self.caution_reasons),
            ("requires_lab_work", self.requires_lab_work, self.required_lab_tests),
        )
        for name, flag, reasons in pairs:
            if flag and not reasons:
                raise ValueError(f"{name} is set but its reason list is empty")
        return self


class SafetyInterlock(BaseModel):
    """One safety check result, rendered in list order."""

    model_config = ConfigDict(frozen=True)

    type: InterlockType
    label: str
    detected: bool = True


class SkinAnalysisSnapshot(BaseModel):
    """Categorical skin descriptors from the image-analysis collaborator."""

    model_config = ConfigDict(frozen=True)

    texture: str
    pores: str
    pigment: str
    redness: str


class TransparencyRecord(BaseModel):
    """Auditable explanation of a treatment recommendation."""

    model_config = ConfigDict(frozen=True)

    clinical_criteria: str = Field(description="Clinical justification, verbatim")
    data_source: str = Field(description="Provenance of the analysed data")
    safety_interlocks: Tuple[SafetyInterlock, ...] = Field(
        description="Interlocks in display order"
    )
    guidelines_reference: str = Field(description="Guideline citation")


class TransparencyRequest(BaseModel):
    """Request to compile a transparency record."""

    treatment_name: str = Field(description="Treatment as shown to the patient")
    clinical_reason: str = Field(description="Why the treatment is suggested")
    safety_status: Optional[SafetyStatus] = Field(default=None)
    patient_conditions: List[str] = Field(
        default_factory=list,
        description="Patient condition codes"
    )
    skin_iq_data: Optional[SkinAnalysisSnapshot] = Field(default=None)


class SafetyCheckRequest(BaseModel):
    """Request to screen a treatment against patient conditions."""

    treatment_name: str
    patient_conditions: List[str] = Field(default_factory=list)
    has_lab_work: bool = Field(
        default=False,
        description="Recent lab results are on file"
    )


class InteractionCheckRequest(BaseModel):
    """Request to check a treatment against treatments already booked."""

    selected_treatment: str
    existing_treatments: List[str] = Field(default_factory=list)


class InteractionCheckResult(BaseModel):
    """First scheduling conflict found, if any."""

    has_conflict: bool = False
    conflicting_treatment: Optional[str] = None
    wait_period_days: Optional[int] = None
    conflict_message: Optional[str] = None


class PostCareRecommendation(BaseModel):
    """Follow-up treatment suggested after a procedure."""

    model_config = ConfigDict(frozen=True)

    trigger_treatment: str
    recommend_treatment: str
    reason: str
    is_post_care: bool = True


class HealthConditionInfo(BaseModel):
    """Entry of the health questionnaire catalogue."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    category: ConditionCategory
    severity: ConditionSeverity


# =============================================================================
# Staff Session
# =============================================================================

class SessionStatus(BaseModel):
    """Snapshot of the staff session handed to the rendering layer."""

    phase: SessionPhase
    is_authenticated: bool
    remaining_seconds: Optional[int] = Field(
        default=None,
        description="Seconds until auto-logout, None when signed out"
    )
    show_warning: bool = False
    remaining_display: Optional[str] = Field(
        default=None,
        description="Remaining time as m:ss"
    )


class LoginRequest(BaseModel):
    """Staff passcode entry."""

    passcode: str = Field(description="4-digit staff passcode")


class LoginResponse(BaseModel):
    """Result of a passcode check."""

    authenticated: bool
    session: SessionStatus


# =============================================================================
# Audit Trail
# =============================================================================

class AuditEntry(BaseModel):
    """One audited event."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=_utcnow)
    event_type: AuditEventType
    user_role: UserRole = UserRole.SYSTEM
    action: str
    outcome: AuditOutcome = AuditOutcome.SUCCESS
    details: Optional[Dict[str, Any]] = None


class AuditSummary(BaseModel):
    """Event counts by type."""

    total: int
    by_event_type: Dict[str, int]


# =============================================================================
# Health & Errors
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    version: str = Field(description="Application version")
    timestamp: datetime = Field(default_factory=_utcnow)


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(description="Error type")
    message: str = Field(description="Human-readable error message")
    error_code: str = Field(description="Machine-readable error code")
    timestamp: datetime = Field(default_factory=_utcnow)
