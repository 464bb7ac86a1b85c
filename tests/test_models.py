"""
Tests for record, request and token models.
"""

import pytest
from pydantic import ValidationError

from models import (
    BotCommandRequest, Contact, ExtensionDirectoryEntry, Identity, LoginResponse,
    Page, PhoneNumberEntry, SearchRequest, TokenData, SMS_FEATURE
)


class TestPlatformRecords:

    def test_page_from_response(self):
        page = Page.from_response({"records": [{"id": 1}], "paging": {"page": 2, "totalPages": 4}})
        assert (page.page, page.total_pages, page.records) == (2, 4, [{"id": 1}])

    def test_page_without_paging_is_last_page(self):
        page = Page.from_response({"records": []})
        assert (page.page, page.total_pages) == (1, 1)

    def test_identity_from_record(self):
        identity = Identity.from_record({
            "id": 1001, "name": "Alice", "extensionNumber": 101, "contact": {"email": "a@x.com"},
        })
        assert identity.id == "1001"
        assert identity.extension_number == "101"
        assert identity.describe() == "Alice(101, a@x.com)"

    def test_identity_without_email(self):
        assert Identity.from_record({"name": "Bot", "extensionNumber": "9"}).describe() == "Bot(9, None)"

    def test_extension_entry_reads_contact(self):
        entry = ExtensionDirectoryEntry.from_record({
            "id": 7, "name": "Bob Smith", "extensionNumber": "102",
            "contact": {"firstName": "Bob", "lastName": "Smith"}, "features": ["SmsSender"],
        })
        assert (entry.first_name, entry.last_name, entry.extension_number) == ("Bob", "Smith", "102")

    def test_phone_number_features(self):
        sms = PhoneNumberEntry.from_record({"phoneNumber": "+15550100", "features": [SMS_FEATURE]})
        bare = PhoneNumberEntry.from_record({"phoneNumber": "+15550101"})

        assert sms.has_feature(SMS_FEATURE)
        assert bare.features is None
        assert not bare.has_feature(SMS_FEATURE)

    def test_phone_number_serializes_camel_case(self):
        entry = PhoneNumberEntry.from_record({"id": 1, "phoneNumber": "+15550100", "usageType": "DirectNumber"})
        dumped = entry.model_dump(by_alias=True)
        assert dumped["phoneNumber"] == "+15550100"
        assert dumped["usageType"] == "DirectNumber"
        assert "phone_number" not in dumped

    def test_contact_serializes_camel_case(self):
        contact = Contact.from_address_book({"firstName": "Ann", "lastName": "Lee", "mobilePhone": "+1555"})
        assert contact.model_dump(by_alias=True) == {
            "name": "Ann Lee", "firstName": "Ann", "lastName": "Lee", "phoneNumber": "+1555",
        }


class TestRequests:

    def test_bot_command_aliases(self):
        command = BotCommandRequest.model_validate({"botUserId": "u1", "groupId": "g1"})
        assert (command.bot_user_id, command.group_id) == ("u1", "g1")

    @pytest.mark.parametrize("body", [
        {"botUserId": "  ", "groupId": "g1"},
        {"botUserId": "u1", "groupId": ""},
        {"botUserId": "u:1", "groupId": "g1"},
    ])
    def test_bot_command_validation(self, body):
        with pytest.raises(ValidationError):
            BotCommandRequest.model_validate(body)

    def test_group_id_may_contain_separator(self):
        assert BotCommandRequest.model_validate({"botUserId": "u1", "groupId": "a:b"}).group_id == "a:b"

    def test_search_requires_name(self):
        with pytest.raises(ValidationError):
            SearchRequest.model_validate({"botUserId": "u1", "name": " "})

    def test_login_response_omits_url_when_logged_in(self):
        assert LoginResponse(status="logged_in").model_dump(by_alias=True, exclude_none=True) == {"status": "logged_in"}


class TestTokenData:

    def test_from_token_response(self):
        token = TokenData.from_token_response(
            {"access_token": "a", "refresh_token": "r", "expires_in": 3600,
             "refresh_token_expires_in": 7200, "owner_id": 42},
            now=1000.0,
        )
        assert token.expires_at == 4600.0
        assert token.refresh_token_expires_at == 8200.0
        assert token.owner_id == "42"

    def test_dict_round_trip(self):
        token = TokenData(access_token="a", refresh_token="r", expires_at=123.0, scope="ReadAccounts")
        assert TokenData.from_dict(token.to_dict()) == token

    def test_expiry_and_refresh(self):
        expired = TokenData(access_token="a", refresh_token="r", expires_at=0)
        assert expired.is_expired()
        assert expired.can_refresh()

        no_refresh = TokenData(access_token="a", refresh_token=None, expires_at=0)
        assert not no_refresh.can_refresh()
