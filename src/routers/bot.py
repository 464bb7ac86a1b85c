"""
Bot command routes.

The chat bot backend forwards parsed user commands here; replies to the user
go out through the chat gateway, the JSON body is for the caller.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from core.context import ServiceContext
from models import (
    BotCommandRequest, SearchRequest,
    LoginResponse, LogoutResponse, SearchResponse, SmsNumbersResponse
)


def create_bot_router(context: ServiceContext) -> APIRouter:
    """Create bot command router bound to the service context."""
    router = APIRouter(prefix="/bot", tags=["Bot"])

    @router.post("/login")
    async def login(command: BotCommandRequest) -> JSONResponse:
        login_url = await context.flow.initiate_login(command.bot_user_id, command.group_id)
        if login_url is None:
            response = LoginResponse(status="logged_in")
        else:
            response = LoginResponse(status="login_required", login_url=login_url)
        return JSONResponse(content=response.model_dump(by_alias=True, exclude_none=True))

    @router.post("/logout")
    async def logout(command: BotCommandRequest) -> JSONResponse:
        logged_out = await context.flow.logout(command.bot_user_id, command.group_id)
        response = LogoutResponse(status="logged_out" if logged_out else "not_logged_in")
        return JSONResponse(content=response.model_dump())

    @router.post("/search")
    async def search(query: SearchRequest) -> JSONResponse:
        contacts = await context.directory.search_contacts(query.bot_user_id, query.name)
        return JSONResponse(content=SearchResponse(contacts=contacts).model_dump(by_alias=True))

    @router.get("/users/{bot_user_id}/sms-numbers")
    async def sms_numbers(bot_user_id: str) -> JSONResponse:
        numbers = await context.directory.get_sms_capable_numbers(bot_user_id)
        return JSONResponse(content=SmsNumbersResponse(phone_numbers=numbers).model_dump(by_alias=True))

    return router
