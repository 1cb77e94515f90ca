"""
Event log and audit endpoints
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from .dependencies import get_deployment
from ..deployment import Deployment
from ..events import LedgerEventType


router = APIRouter()


@router.get("/events")
def get_events(
    event_type: Optional[str] = None,
    account: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    deployment: Deployment = Depends(get_deployment)
):
    """Get emitted Transfer/Approval events, oldest first"""
    kind = None
    if event_type:
        try:
            kind = LedgerEventType(event_type)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown event type: {event_type}")

    events = deployment.ledger.events(event_type=kind, account=account, limit=limit)
    return {"events": [event.to_dict() for event in events]}


@router.get("/audit/integrity")
def verify_audit_integrity(deployment: Deployment = Depends(get_deployment)):
    """Verify the audit hash chain"""
    if not deployment.audit_trail:
        raise HTTPException(status_code=404, detail="Audit logging is disabled")
    return deployment.audit_trail.verify_integrity()
