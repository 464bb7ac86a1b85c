"""Response models for the bot command endpoints."""

from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from .directory import Contact, PhoneNumberEntry


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["logged_in", "login_required"]
    login_url: Optional[str] = Field(default=None, alias="loginUrl")


class LogoutResponse(BaseModel):
    status: Literal["logged_out", "not_logged_in"]


class SearchResponse(BaseModel):
    contacts: List[Contact]


class SmsNumbersResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone_numbers: List[PhoneNumberEntry] = Field(alias="phoneNumbers")


class CallbackResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["success"] = "success"
    message: str
    bot_user_id: str = Field(alias="botUserId")
    group_id: str = Field(alias="groupId")
