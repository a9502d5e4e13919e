"""
Tests for SessionStore login, logout, registration and profile refresh
"""
import json
import pytest

from errors import AuthError, NetworkError
from services.auth_api import AuthAPI
from session_store import SessionStore
from storage import InMemoryStorage


ADA = {"email": "ada@example.com", "password": "correct-horse"}


@pytest.mark.asyncio
async def test_login_sets_and_persists_session(store, storage):
    result = await store.login(ADA)

    assert store.token == result.token
    assert store.user.email == "ada@example.com"
    assert store.error is None
    assert store.is_authenticated() is True

    # Both halves of the session are persisted
    assert storage.get("token") == result.token
    assert json.loads(storage.get("user"))["email"] == "ada@example.com"


@pytest.mark.asyncio
async def test_login_with_invalid_credentials_reports_error(store, storage):
    with pytest.raises(AuthError) as exc_info:
        await store.login({"email": "ada@example.com", "password": "wrong"})

    assert exc_info.value.message == "Invalid email or password"
    assert store.token is None
    assert store.user is None
    assert store.error == "Invalid email or password"
    assert store.is_loading is False
    assert storage.get("token") is None
    assert storage.get("user") is None


@pytest.mark.asyncio
async def test_failed_login_leaves_existing_session_untouched(store, storage):
    await store.login(ADA)
    token = store.token

    with pytest.raises(AuthError):
        await store.login({"email": "root@example.com", "password": "nope"})

    assert store.token == token
    assert store.user.email == "ada@example.com"
    assert storage.get("token") == token


@pytest.mark.asyncio
async def test_clear_error_keeps_session(store):
    with pytest.raises(AuthError):
        await store.login({"email": "ada@example.com", "password": "wrong"})

    store.clear_error()

    assert store.error is None
    assert store.token is None


@pytest.mark.asyncio
async def test_logout_clears_session(store, storage, backend):
    await store.login(ADA)

    await store.logout()

    assert store.token is None
    assert store.user is None
    assert storage.get("token") is None
    assert storage.get("user") is None
    assert backend.count("DELETE", "/auth/sign_out") == 1


@pytest.mark.asyncio
async def test_logout_clears_session_when_remote_call_fails(store, storage, backend):
    await store.login(ADA)
    backend.fail_logout = True

    await store.logout()

    assert store.token is None
    assert store.user is None
    assert store.error is None
    assert storage.get("token") is None
    assert storage.get("user") is None


@pytest.mark.asyncio
async def test_logout_clears_session_when_offline(store, storage, backend):
    await store.login(ADA)
    backend.network_down = True

    await store.logout()

    assert store.is_authenticated() is False
    assert storage.get("token") is None


@pytest.mark.asyncio
async def test_register_does_not_start_a_session(store, storage):
    response = await store.register({
        "first_name": "Linus",
        "email": "linus@example.com",
        "password": "secret-pass",
        "password_confirmation": "secret-pass",
    })

    assert response == {"message": "Signed up successfully."}
    assert store.token is None
    assert store.user is None
    assert storage.get("token") is None


@pytest.mark.asyncio
async def test_register_failure_uses_backend_error_list(store):
    with pytest.raises(AuthError) as exc_info:
        await store.register({"email": "ada@example.com", "password": "whatever"})

    assert exc_info.value.message == "Email has already been taken"
    assert store.error == "Email has already been taken"


@pytest.mark.asyncio
async def test_register_failure_uses_field_errors(store):
    with pytest.raises(AuthError) as exc_info:
        await store.register({"email": "new@example.com", "password": "123"})

    assert exc_info.value.message == "password is too short (minimum is 6 characters)"


@pytest.mark.asyncio
async def test_session_survives_restart(context, storage, store):
    await store.login(ADA)

    restarted = SessionStore(storage, AuthAPI(context.api_client))

    assert restarted.token == store.token
    assert restarted.user == store.user


def test_incomplete_stored_session_is_discarded(context, storage):
    storage.set("token", "orphan-token")

    restored = SessionStore(storage, AuthAPI(context.api_client))

    assert restored.token is None
    assert restored.user is None
    assert storage.get("token") is None


def test_unreadable_stored_user_is_discarded(context, storage):
    storage.set("token", "token-1")
    storage.set("user", "{not json")

    restored = SessionStore(storage, AuthAPI(context.api_client))

    assert restored.is_authenticated() is False
    assert storage.get("token") is None
    assert storage.get("user") is None


@pytest.mark.asyncio
async def test_refresh_user_replaces_user_wholesale(store, storage, backend):
    await store.login(ADA)
    backend.accounts["ada@example.com"]["user"]["company_name"] = None
    backend.accounts["ada@example.com"]["user"]["first_name"] = "Augusta"

    user = await store.refresh_user()

    assert user.first_name == "Augusta"
    assert store.user.company_name is None
    assert json.loads(storage.get("user"))["first_name"] == "Augusta"


@pytest.mark.asyncio
async def test_refresh_user_swallows_failures(store, backend):
    await store.login(ADA)
    before = store.user
    backend.network_down = True

    assert await store.refresh_user() is None
    assert store.user == before


@pytest.mark.asyncio
async def test_fetch_profile_propagates_failures(store, backend):
    await store.login(ADA)
    backend.network_down = True

    with pytest.raises(NetworkError):
        await store.fetch_profile()

    assert store.is_loading is False
    assert store.is_authenticated() is True


@pytest.mark.asyncio
async def test_rejected_token_drops_session(store, storage, backend):
    await store.login(ADA)
    backend.tokens.clear()

    assert await store.refresh_user() is None

    assert store.token is None
    assert store.user is None
    assert storage.get("token") is None


@pytest.mark.asyncio
async def test_profile_response_after_logout_is_discarded(store, storage):
    await store.login(ADA)
    auth_api = store._auth_api
    response = await auth_api.get_profile()
    await store.logout()

    # A late profile response must not bring back a user without a token
    assert store._replace_user(response.user) is False
    assert store.user is None
    assert storage.get("user") is None


@pytest.mark.asyncio
async def test_update_profile(store):
    await store.login(ADA)

    user = await store.update_profile({"company_name": "Difference Engines"})

    assert user.company_name == "Difference Engines"
    assert store.user.company_name == "Difference Engines"


@pytest.mark.asyncio
async def test_token_and_user_always_change_together(store):
    states = []
    unsubscribe = store.subscribe(states.append)

    await store.login(ADA)
    await store.refresh_user()
    await store.logout()
    with pytest.raises(AuthError):
        await store.login({"email": "ada@example.com", "password": "wrong"})
    unsubscribe()

    assert states
    for state in states:
        assert bool(state.token) == (state.user is not None)


class UserWriteFails(InMemoryStorage):
    def set(self, key, value):
        if key == "user":
            raise RuntimeError("disk full")
        super().set(key, value)


@pytest.mark.asyncio
async def test_failed_user_write_leaves_no_orphan_token(context):
    storage = UserWriteFails({"token": "old-token", "user": json.dumps({"id": 7, "email": "old@example.com"})})
    store = SessionStore(storage, AuthAPI(context.api_client))
    assert store.token == "old-token"

    with pytest.raises(RuntimeError):
        await store.login(ADA)

    # The old token is removed before the new user is written
    assert storage.get("token") is None
    assert store.is_loading is False
