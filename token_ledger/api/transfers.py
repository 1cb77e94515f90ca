"""
Transfer, approval and delegated transfer endpoints
"""

from fastapi import APIRouter, Depends, status

from .dependencies import get_caller, get_deployment
from ..amounts import parse_base_units
from .schemas import TransferRequest, ApprovalRequest, DelegatedTransferRequest, ErrorResponse
from ..deployment import Deployment


router = APIRouter(responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})


@router.post("/transfers", status_code=status.HTTP_201_CREATED)
def create_transfer(
    request: TransferRequest,
    caller: str = Depends(get_caller),
    deployment: Deployment = Depends(get_deployment)
):
    """Transfer tokens from the caller"""
    deployment.ledger.transfer(caller, request.to, parse_base_units(request.amount))
    return {
        "success": True,
        "from": caller.lower(),
        "to": request.to.lower(),
        "amount": request.amount,
        "message": "Transfer completed"
    }


@router.post("/approvals", status_code=status.HTTP_201_CREATED)
def create_approval(
    request: ApprovalRequest,
    caller: str = Depends(get_caller),
    deployment: Deployment = Depends(get_deployment)
):
    """Set the allowance of a spender on the caller's balance"""
    deployment.ledger.approve(caller, request.spender, parse_base_units(request.amount))
    return {
        "success": True,
        "owner": caller.lower(),
        "spender": request.spender.lower(),
        "amount": request.amount,
        "message": "Allowance approved"
    }


@router.post("/transfers/delegated", status_code=status.HTTP_201_CREATED)
def create_delegated_transfer(
    request: DelegatedTransferRequest,
    caller: str = Depends(get_caller),
    deployment: Deployment = Depends(get_deployment)
):
    """Spend the caller's allowance on another account"""
    deployment.ledger.transfer_from(caller, request.from_address, request.to, parse_base_units(request.amount))
    return {
        "success": True,
        "spender": caller.lower(),
        "from": request.from_address.lower(),
        "to": request.to.lower(),
        "amount": request.amount,
        "message": "Delegated transfer completed"
    }
