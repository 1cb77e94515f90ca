"""
Request dependencies: the deployment handle and the caller identity
"""

from fastapi import Header, Request

from ..deployment import Deployment


def get_deployment(request: Request) -> Deployment:
    """Deployment attached to the application by create_app()"""
    return request.app.state.deployment


def get_caller(x_caller_address: str = Header(..., alias="X-Caller-Address")) -> str:
    """Acting address, supplied explicitly by the calling context"""
    return x_caller_address
