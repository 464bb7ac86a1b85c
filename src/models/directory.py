"""Directory models built from platform REST records."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

# Feature tag marking a number that can send SMS
SMS_FEATURE = "SmsSender"


def _str_or_none(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


class Page(BaseModel):
    """One page of a platform list endpoint."""
    records: List[Dict[str, Any]] = Field(default_factory=list)
    page: int = 1
    total_pages: int = 1

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "Page":
        paging = data.get("paging") or {}
        page = int(paging.get("page", 1))
        return cls(
            records=data.get("records") or [],
            page=page,
            total_pages=int(paging.get("totalPages", page)),
        )


class Identity(BaseModel):
    """Profile of the extension a bot user logged in with."""
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    name: str = ""
    extension_number: str = ""
    email: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Identity":
        contact = record.get("contact") or {}
        return cls(
            id=_str_or_none(record.get("id")),
            name=record.get("name") or "",
            extension_number=str(record.get("extensionNumber") or ""),
            email=contact.get("email"),
        )

    def describe(self) -> str:
        return f"{self.name}({self.extension_number}, {self.email})"


class ExtensionDirectoryEntry(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    extension_number: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    features: Optional[List[str]] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ExtensionDirectoryEntry":
        contact = record.get("contact") or {}
        return cls(
            id=_str_or_none(record.get("id")),
            name=record.get("name"),
            first_name=contact.get("firstName"),
            last_name=contact.get("lastName"),
            extension_number=_str_or_none(record.get("extensionNumber")),
            type=record.get("type"),
            status=record.get("status"),
            features=record.get("features"),
        )


class PhoneNumberEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    phone_number: str = Field(alias="phoneNumber")
    usage_type: Optional[str] = Field(default=None, alias="usageType")
    type: Optional[str] = None
    features: Optional[List[str]] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "PhoneNumberEntry":
        return cls(
            id=_str_or_none(record.get("id")),
            phone_number=record.get("phoneNumber") or "",
            usage_type=record.get("usageType"),
            type=record.get("type"),
            features=record.get("features"),
        )

    def has_feature(self, feature: str) -> bool:
        return bool(self.features) and feature in self.features


class Contact(BaseModel):
    """One row of a contact search result."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")

    @classmethod
    def from_extension(cls, entry: ExtensionDirectoryEntry) -> "Contact":
        return cls(
            name=entry.name,
            first_name=entry.first_name,
            last_name=entry.last_name,
            phone_number=entry.extension_number,
        )

    @classmethod
    def from_address_book(cls, record: Dict[str, Any]) -> "Contact":
        first_name = record.get("firstName")
        last_name = record.get("lastName")
        return cls(
            name=f"{first_name} {last_name}",
            first_name=first_name,
            last_name=last_name,
            phone_number=record.get("mobilePhone"),
        )
