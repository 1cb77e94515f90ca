"""
Pydantic schemas for API requests and responses

Amounts are decimal strings of base units; uint256 values do not fit
in JSON numbers.
"""

from typing import Optional
from pydantic import BaseModel, Field


AMOUNT_PATTERN = r"^[0-9]+$"


class TransferRequest(BaseModel):
    to: str = Field(..., description="Recipient address")
    amount: str = Field(..., pattern=AMOUNT_PATTERN, description="Amount in base units")


class ApprovalRequest(BaseModel):
    spender: str = Field(..., description="Spender address")
    amount: str = Field(..., pattern=AMOUNT_PATTERN, description="Allowance in base units")


class DelegatedTransferRequest(BaseModel):
    from_address: str = Field(..., description="Owner whose balance is debited")
    to: str = Field(..., description="Recipient address")
    amount: str = Field(..., pattern=AMOUNT_PATTERN, description="Amount in base units")


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
