"""Request models for the bot command endpoints."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BotCommandRequest(BaseModel):
    """A command issued by a chat user inside a chat group."""
    model_config = ConfigDict(populate_by_name=True)

    bot_user_id: str = Field(alias="botUserId")
    group_id: str = Field(alias="groupId")

    @field_validator("bot_user_id", "group_id")
    def check_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("bot_user_id")
    def check_no_separator(cls, v: str) -> str:
        # The OAuth state is split on the first ':'
        if ":" in v:
            raise ValueError("must not contain ':'")
        return v


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bot_user_id: str = Field(alias="botUserId")
    name: str

    @field_validator("name")
    def check_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be empty")
        return v
