"""
Quotely API — Auth, Profile & Contact Service Tests
====================================================

What we test:
    ✅ password hashing and token round trip
    ✅ expired / tampered tokens are rejected
    ✅ signup lower-cases email, derives username, hides the hash
    ✅ duplicate signup is a validation error
    ✅ login with a wrong password or unknown email is the same AuthError
    ✅ profile updates are whitelisted; taken usernames are rejected
    ✅ contact submissions default the subject; newsletter signup is idempotent
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from quotely.config import Settings
from quotely.exceptions import AuthError, NotFoundError, ValidationError
from quotely.security import (
    BCRYPT_MAX_BYTES,
    decode_token,
    hash_password,
    issue_token,
    verify_password,
)
from quotely.services.auth_service import AuthService
from quotely.services.contact_service import DEFAULT_SUBJECT, ContactService


class TestSecurity:

    def test_hash_and_verify(self):
        hashed = hash_password("s3cret!")
        assert hashed.startswith("$2")
        assert verify_password("s3cret!", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_verify_against_garbage(self):
        assert verify_password("anything", None) is False
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_long_passwords_are_truncated(self):
        base = "x" * BCRYPT_MAX_BYTES
        hashed = hash_password(base + "tail-one")
        assert verify_password(base + "tail-two", hashed) is True

    def test_token_round_trip(self):
        user_id = uuid.uuid4()
        assert decode_token(issue_token(user_id)) == user_id

    def test_expired_token(self):
        config = Settings(jwt_secret="k" * 40)
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "iat": now - timedelta(hours=2), "exp": now - timedelta(hours=1)},
            config.jwt_secret,
            algorithm=config.jwt_algorithm,
        )

        with pytest.raises(AuthError, match="expired"):
            decode_token(token, config=config)

    def test_token_signed_with_other_secret(self):
        token = issue_token(uuid.uuid4(), config=Settings(jwt_secret="another-secret-" * 3))
        with pytest.raises(AuthError, match="Invalid token"):
            decode_token(token)

    def test_garbage_token(self):
        with pytest.raises(AuthError):
            decode_token("not.a.jwt")


class TestSignupAndLogin:

    @pytest.mark.asyncio
    async def test_signup(self, store):
        user, token = await AuthService(store).signup(
            email="  Ada@Example.COM ", password="hunter22", name="Ada Lovelace"
        )

        assert user["email"] == "ada@example.com"
        assert user["username"] == "ada"
        assert "password_hash" not in user
        assert "ui-avatars.com" in user["avatar_url"]
        assert decode_token(token) == user["id"]

    @pytest.mark.asyncio
    async def test_duplicate_email(self, store):
        service = AuthService(store)
        await service.signup(email="ada@example.com", password="hunter22", name="Ada")

        with pytest.raises(ValidationError):
            await service.signup(
                email="ADA@example.com", password="hunter22", name="Ada", username="other"
            )

    @pytest.mark.asyncio
    async def test_login(self, store):
        service = AuthService(store)
        created, _ = await service.signup(email="ada@example.com", password="hunter22", name="Ada")

        user, token = await service.login("Ada@Example.com", "hunter22")

        assert user["id"] == created["id"]
        assert decode_token(token) == created["id"]

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, store):
        service = AuthService(store)
        await service.signup(email="ada@example.com", password="hunter22", name="Ada")

        with pytest.raises(AuthError) as wrong_password:
            await service.login("ada@example.com", "hunter23")
        with pytest.raises(AuthError) as unknown_email:
            await service.login("nobody@example.com", "hunter22")

        assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"


class TestProfile:

    @pytest.mark.asyncio
    async def test_update_is_whitelisted(self, store, make_user):
        user = await make_user(email="ada@example.com")

        updated = await AuthService(store).update_profile(
            user["id"], {"bio": "Mathematician", "email": "evil@example.com", "password_hash": "x"}
        )

        assert updated["bio"] == "Mathematician"
        assert updated["email"] == "ada@example.com"
        assert "password_hash" not in updated

    @pytest.mark.asyncio
    async def test_empty_update_returns_profile(self, store, make_user):
        user = await make_user(username="ada")
        profile = await AuthService(store).update_profile(user["id"], {"bio": None})
        assert profile["username"] == "ada"

    @pytest.mark.asyncio
    async def test_taken_username(self, store, make_user):
        await make_user(username="ada")
        bob = await make_user(username="bob")

        with pytest.raises(ValidationError, match="already taken"):
            await AuthService(store).update_profile(bob["id"], {"username": "ada"})

    @pytest.mark.asyncio
    async def test_missing_user(self, store):
        with pytest.raises(NotFoundError):
            await AuthService(store).get_profile(uuid.uuid4())
        with pytest.raises(NotFoundError):
            await AuthService(store).update_profile(uuid.uuid4(), {"bio": "x"})


class TestContact:

    @pytest.mark.asyncio
    async def test_contact_default_subject(self, store):
        row = await ContactService(store).submit_contact(
            name="Ada", email="ada@example.com", message="Hello there"
        )
        assert row["subject"] == DEFAULT_SUBJECT
        assert row["user_id"] is None

    @pytest.mark.asyncio
    async def test_contact_unknown_user(self, store):
        with pytest.raises(ValidationError):
            await ContactService(store).submit_contact(
                name="Ada", email="ada@example.com", message="Hi", user_id=uuid.uuid4()
            )

    @pytest.mark.asyncio
    async def test_subscribe_twice(self, store):
        service = ContactService(store)

        first = await service.subscribe("Reader@Example.com")
        second = await service.subscribe("reader@example.com")

        assert first.created is True
        assert first.subscriber["email"] == "reader@example.com"
        assert second.created is False
