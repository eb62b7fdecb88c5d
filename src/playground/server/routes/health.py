"""Health check routes."""

from typing import Any

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """Health check endpoint.

    Returns:
        Server status, whether the default provider has a credential, and
        the credential status of every provider.
    """
    dispatcher = request.app.state.dispatcher
    providers = dispatcher.provider_status()
    return {
        "status": "OK",
        "message": "Backend server is running",
        "hasApiKey": providers.get(dispatcher.default_provider.value, False),
        "providers": providers,
    }
