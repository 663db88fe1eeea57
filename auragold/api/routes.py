"""
API routes for AuraGold Clinic.

Exposes the transparency engine, contraindication screening, the
staff session lifecycle and the audit trail to the app front end.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from auragold.api.middleware import limiter
from auragold.config import settings
from auragold.core.transparency import transparency_compiler
from auragold.models.schemas import (
    AuditEntry,
    AuditEventType,
    AuditSummary,
    ErrorResponse,
    HealthConditionInfo,
    HealthResponse,
    InteractionCheckRequest,
    InteractionCheckResult,
    LoginRequest,
    LoginResponse,
    PostCareRecommendation,
    SafetyCheckRequest,
    SafetyStatus,
    SessionStatus,
    TransparencyRecord,
    TransparencyRequest
)
from auragold.services.audit_log import audit_log
from auragold.services.contraindications import HEALTH_CONDITIONS, contraindication_checker
from auragold.services.session_guard import session_guard
from auragold.services.session_timer import session_ticker
from auragold.utils.logger import get_logger

logger = get_logger("routes")

router = APIRouter()


async def require_staff_session() -> SessionStatus:
    """Dependency rejecting requests without a live staff session."""
    status = session_guard.tick()
    if not status.is_authenticated:
        raise HTTPException(
            status_code=401,
            detail="Staff session required. Please log in with the clinic passcode."
        )
    return status


# =============================================================================
# Health Check
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["System"],
    summary="Health check endpoint"
)
async def health_check():
    """Check if the service is healthy and running."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version
    )


# =============================================================================
# Treatment Safety
# =============================================================================

@router.post(
    "/transparency",
    response_model=TransparencyRecord,
    tags=["Treatment Safety"],
    summary="Explain a treatment recommendation"
)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def compile_transparency(request: Request, body: TransparencyRequest):
    """
    Build the transparency record for one treatment.

    Returns clinical criteria, data source, ordered safety interlocks
    and the guideline citation. The record is rebuilt on every call.
    """
    return transparency_compiler.compile(
        body.treatment_name,
        body.clinical_reason,
        safety_status=body.safety_status,
        patient_conditions=body.patient_conditions,
        skin_iq_data=body.skin_iq_data
    )


@router.post(
    "/safety-check",
    response_model=SafetyStatus,
    tags=["Treatment Safety"],
    summary="Screen a treatment for contraindications"
)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def safety_check(request: Request, body: SafetyCheckRequest):
    """Screen a treatment against the patient's reported conditions."""
    return contraindication_checker.check_treatment_safety(
        body.treatment_name,
        body.patient_conditions,
        has_lab_work=body.has_lab_work
    )


@router.post(
    "/interactions",
    response_model=InteractionCheckResult,
    tags=["Treatment Safety"],
    summary="Check a treatment against treatments already planned"
)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def check_interactions(request: Request, body: InteractionCheckRequest):
    """Report the first scheduling conflict with the existing plan."""
    return contraindication_checker.check_treatment_interaction(
        body.selected_treatment,
        body.existing_treatments
    )


@router.get(
    "/post-care",
    response_model=List[PostCareRecommendation],
    tags=["Treatment Safety"],
    summary="Post-care treatments suggested after a procedure"
)
async def post_care(treatment: str = Query(min_length=1)):
    """Follow-up suggestions for one treatment; empty when none apply."""
    return contraindication_checker.post_care_recommendations(treatment)


@router.get(
    "/conditions",
    response_model=List[HealthConditionInfo],
    tags=["Treatment Safety"],
    summary="Health questionnaire condition catalogue"
)
async def list_conditions():
    """Condition codes accepted by the screening endpoints."""
    return list(HEALTH_CONDITIONS)


# =============================================================================
# Staff Session
# =============================================================================

@router.post(
    "/session/login",
    response_model=LoginResponse,
    tags=["Session"],
    summary="Log in with the staff passcode"
)
@limiter.limit(f"{settings.login_rate_limit_per_minute}/minute")
async def login(request: Request, body: LoginRequest):
    """
    Check the staff passcode.

    A wrong passcode is not an error: the response carries
    authenticated=false and the client decides how to react.

    The session guard itself never locks out after failed attempts.
    The per-IP limit here is transport throttling shared with the other
    endpoints; it also caps brute forcing of a 4-digit code, at the cost
    of a 429 for a staff member who mistypes repeatedly from a busy
    front-desk address.
    """
    authenticated = session_guard.login(body.passcode)
    if authenticated:
        session_ticker.start()
    return LoginResponse(
        authenticated=authenticated,
        session=session_guard.status()
    )


@router.get(
    "/session/status",
    response_model=SessionStatus,
    tags=["Session"],
    summary="Current staff session state"
)
async def session_status():
    """Remaining time and warning flag for the session banner."""
    return session_guard.status()


@router.post(
    "/session/extend",
    response_model=SessionStatus,
    tags=["Session"],
    summary="Extend the staff session",
    responses={401: {"model": ErrorResponse, "description": "No live session"}}
)
async def extend_session():
    """Reset the inactivity timer of a live session."""
    if not session_guard.extend():
        raise HTTPException(
            status_code=401,
            detail="Session has expired. Please log in again."
        )
    return session_guard.status()


@router.post(
    "/session/logout",
    response_model=SessionStatus,
    tags=["Session"],
    summary="End the staff session"
)
async def logout():
    """End the session and stop the countdown."""
    session_guard.logout()
    await session_ticker.stop()
    return session_guard.status()


# =============================================================================
# Audit Trail (staff only)
# =============================================================================

@router.get(
    "/audit/events",
    response_model=List[AuditEntry],
    tags=["Audit"],
    summary="List audited authentication events",
    responses={401: {"model": ErrorResponse, "description": "No live session"}}
)
async def list_audit_events(
    event_type: Optional[AuditEventType] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    _: SessionStatus = Depends(require_staff_session)
):
    """Newest-first audit entries, optionally filtered by event type."""
    return audit_log.entries(event_type=event_type, limit=limit)


@router.get(
    "/audit/summary",
    response_model=AuditSummary,
    tags=["Audit"],
    summary="Audit event counts",
    responses={401: {"model": ErrorResponse, "description": "No live session"}}
)
async def audit_summary(_: SessionStatus = Depends(require_staff_session)):
    """Counts of audited events by type."""
    return audit_log.summary()
