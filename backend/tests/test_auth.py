from types import SimpleNamespace

import pytest

from errors import Forbidden, ServiceUnavailable
from services.auth import Caller, Identity, SupabaseIdentityProvider, extract_bearer_token, require_role


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc") == "abc"
    assert extract_bearer_token("Bearer  abc ") == "abc"
    assert extract_bearer_token("abc") == "abc"
    assert extract_bearer_token("Bearer ") is None
    assert extract_bearer_token("") is None
    assert extract_bearer_token(None) is None


def test_require_role():
    teacher = Caller(user_id="t", role="teacher")
    assert require_role(teacher) is teacher
    with pytest.raises(Forbidden):
        require_role(Caller(user_id="s", role="student"))
    with pytest.raises(Forbidden):
        require_role(Caller(user_id="x", role=None))
    with pytest.raises(Forbidden):
        require_role(None)


def test_identity_role_falls_back_to_student():
    assert Identity(user_id="u", metadata={"role": "teacher"}).role == "teacher"
    assert Identity(user_id="u", metadata={"role": "owner"}).role == "student"
    assert Identity(user_id="u").role == "student"


@pytest.mark.anyio
async def test_unconfigured_supabase_is_reported():
    provider = SupabaseIdentityProvider("", "")
    with pytest.raises(ServiceUnavailable):
        await provider.resolve_token("token")
    with pytest.raises(ServiceUnavailable):
        await provider.create_user("a@example.com", "secret1", "A", "student")


@pytest.mark.anyio
async def test_resolve_token_maps_supabase_user():
    class StubAuth:
        async def get_user(self, token):
            if token != "good":
                return None
            user = SimpleNamespace(id="u1", email="u1@example.com", user_metadata={"role": "teacher", "name": "Jan"})
            return SimpleNamespace(user=user)

    provider = SupabaseIdentityProvider("https://example.supabase.co", "anon-key")
    provider._anon_client = SimpleNamespace(auth=StubAuth())

    identity = await provider.resolve_token("good")
    assert identity == Identity(user_id="u1", email="u1@example.com", metadata={"role": "teacher", "name": "Jan"})
    assert identity.name == "Jan"
    assert await provider.resolve_token("bad") is None
