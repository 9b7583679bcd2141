"""
Tests for registration and login.
"""

import pytest

from auth.errors import AuthenticationFailed, Conflict, InvalidField, InvalidRole
from auth.models import PublicUser, Role


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_creates_user_without_secret(self, auth_service, store):
        user = await auth_service.register("Ada", "ada@x.com", "pw-ada", "admin")
        assert isinstance(user, PublicUser)
        assert user.role is Role.ADMIN
        assert "password_hash" not in user.model_dump()

        stored = await store.find_by_email("ada@x.com")
        assert stored is not None
        assert stored.password_hash != "pw-ada"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["instructor", "", "root", "Administrator", "ADMIN", " student "])
    async def test_invalid_role_creates_nothing(self, auth_service, store, role):
        with pytest.raises(InvalidRole):
            await auth_service.register("Eve", "eve@x.com", "pw", role)
        assert await store.find_by_email("eve@x.com") is None

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, auth_service):
        await auth_service.register("Ada", "ada@x.com", "pw", "student")
        with pytest.raises(Conflict):
            await auth_service.register("Other", "ada@x.com", "pw2", "admin")

    @pytest.mark.asyncio
    async def test_email_uniqueness_ignores_case(self, auth_service):
        await auth_service.register("Ada", "Ada@X.com", "pw", "student")
        with pytest.raises(Conflict):
            await auth_service.register("Ada2", " ada@x.COM ", "pw", "student")


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_issues_token_for_user(self, auth_service, codec):
        registered = await auth_service.register("Ada", "ada@x.com", "pw-ada", "student")
        result = await auth_service.login("ada@x.com", "pw-ada")

        claims = codec.verify(result.token)
        assert claims.subject == str(registered.id)
        assert claims.role is Role.STUDENT
        assert result.user.id == registered.id
        assert result.user.email == "ada@x.com"

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth_service):
        await auth_service.register("Ada", "ada@x.com", "pw-ada", "student")
        with pytest.raises(AuthenticationFailed):
            await auth_service.login("ada@x.com", "pw-eve")

    @pytest.mark.asyncio
    async def test_unknown_email(self, auth_service):
        with pytest.raises(AuthenticationFailed):
            await auth_service.login("nobody@x.com", "pw")

    @pytest.mark.asyncio
    async def test_unknown_email_still_runs_a_hash_check(self, auth_service, monkeypatch):
        calls = []
        verifier = auth_service._verifier
        original = verifier.reject

        def spy(secret):
            calls.append(secret)
            return original(secret)

        monkeypatch.setattr(verifier, "reject", spy)
        with pytest.raises(AuthenticationFailed):
            await auth_service.login("nobody@x.com", "pw")
        assert calls == ["pw"]


class TestBlankNames:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   ", "\t\n"])
    async def test_blank_name_rejected(self, auth_service, store, name):
        with pytest.raises(InvalidField):
            await auth_service.register(name, "blank@x.com", "pw", "student")
        assert await store.find_by_email("blank@x.com") is None

    @pytest.mark.asyncio
    async def test_name_is_trimmed(self, auth_service):
        user = await auth_service.register("  Ada  ", "ada@x.com", "pw", "student")
        assert user.name == "Ada"
