"""
Balance and allowance queries
"""

from fastapi import APIRouter, Depends

from .dependencies import get_deployment
from ..deployment import Deployment


router = APIRouter()


@router.get("/balances/{address}")
def get_balance(address: str, deployment: Deployment = Depends(get_deployment)):
    """Get the balance of an account"""
    balance = deployment.ledger.balance_of(address)
    return {
        "address": address.lower(),
        "balance": str(balance),
        "formatted": deployment.metadata.format_amount(balance)
    }


@router.get("/allowances/{owner}/{spender}")
def get_allowance(owner: str, spender: str, deployment: Deployment = Depends(get_deployment)):
    """Get how much spender may still move out of owner's balance"""
    amount = deployment.ledger.allowance(owner, spender)
    return {
        "owner": owner.lower(),
        "spender": spender.lower(),
        "allowance": str(amount),
        "formatted": deployment.metadata.format_amount(amount)
    }


@router.get("/holders")
def get_holders(deployment: Deployment = Depends(get_deployment)):
    """Snapshot of all non-zero balances"""
    holders = deployment.ledger.holders()
    return {
        "holders": {address: str(balance) for address, balance in holders.items()},
        "supply_consistent": sum(holders.values()) == deployment.ledger.total_supply()
    }
