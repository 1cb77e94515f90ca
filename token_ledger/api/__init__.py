"""
Token Ledger API Application Factory
"""

from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..deployment import Deployment, deploy
from ..errors import LedgerError, InsufficientBalance, InsufficientAllowance, Unauthorized
from .accounts import router as accounts_router
from .dependencies import get_deployment
from .events import router as events_router
from .transfers import router as transfers_router


def error_status(error: LedgerError) -> int:
    """HTTP status for a ledger rejection"""
    if isinstance(error, Unauthorized):
        return 403
    if isinstance(error, (InsufficientBalance, InsufficientAllowance)):
        return 409
    return 400


def create_app(deployment: Optional[Deployment] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Token Ledger API",
        description="Fixed-supply fungible token ledger",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.deployment = deployment or deploy()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        return JSONResponse(status_code=error_status(exc), content=exc.to_dict())

    app.include_router(accounts_router, tags=["Accounts"])
    app.include_router(transfers_router, tags=["Transfers"])
    app.include_router(events_router, tags=["Events"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "token_ledger_api",
            "version": __version__
        }

    @app.get("/token")
    def get_token(deployment: Deployment = Depends(get_deployment)):
        """Token metadata and total supply"""
        supply = deployment.ledger.total_supply()
        return {
            **deployment.metadata.to_dict(),
            "total_supply": str(supply),
            "total_supply_formatted": deployment.metadata.format_amount(supply)
        }

    return app


def run_server(host: str = "0.0.0.0", port: int = 8095, debug: bool = False):
    """Run the FastAPI server"""
    uvicorn.run(
        "token_ledger.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=debug,
        log_level="info"
    )
