"""
Tests for the session registry.
"""

from sessions import DEFAULT_TOKEN_NAMESPACE, SessionRegistry, token_key


class TestSessionRegistry:

    def test_token_key_format(self):
        assert token_key("u1") == "rc-token:glip-user:u1"
        assert token_key("u1", "tenant-a") == "tenant-a:u1"

    def test_get_or_create_is_idempotent(self):
        created = []

        def factory(key):
            created.append(key)
            return object()

        registry = SessionRegistry(factory)
        first = registry.get_or_create("u1")
        second = registry.get_or_create("u1")

        assert first is second
        assert created == [f"{DEFAULT_TOKEN_NAMESPACE}:u1"]
        assert first.bot_user_id == "u1"
        assert first.token_key == "rc-token:glip-user:u1"

    def test_sessions_are_per_user(self):
        registry = SessionRegistry(lambda key: key, namespace="ns")

        assert registry.get_or_create("u1").client == "ns:u1"
        assert registry.get_or_create("u2").client == "ns:u2"
        assert len(registry) == 2

    def test_get_does_not_create(self):
        registry = SessionRegistry(lambda key: key)

        assert registry.get("u1") is None
        assert "u1" not in registry
        assert len(registry) == 0

        registry.get_or_create("u1")
        assert "u1" in registry
        assert registry.get("u1").client == "rc-token:glip-user:u1"
