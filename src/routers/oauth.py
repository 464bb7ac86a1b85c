"""
OAuth callback route for the RingCentral session gateway.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from core.context import ServiceContext
from models import CallbackResponse


def create_oauth_router(context: ServiceContext) -> APIRouter:
    """Create OAuth router bound to the service context."""
    router = APIRouter(prefix="/oauth", tags=["OAuth"])

    @router.get("/callback")
    async def oauth_callback(request: Request) -> JSONResponse:
        """
        Redirect target of the RingCentral authorization page.

        Failures are raised as gateway errors and mapped to HTTP status codes
        by the application's exception handlers.
        """
        state = await context.flow.handle_callback(dict(request.query_params))
        response = CallbackResponse(
            message="Your RingCentral account is linked. You can close this page and return to the chat.",
            bot_user_id=state.bot_user_id,
            group_id=state.group_id,
        )
        return JSONResponse(content=response.model_dump(by_alias=True))

    return router
