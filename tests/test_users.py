"""Test registration and login."""
import pytest

from core.errors import UserError
from core.security import decode_token
from patterns.domain_config import AuthConfig
from verticals.bookstore.models.schemas import LoginRequest, RegisterRequest
from verticals.bookstore.usecases.user import UserUseCase

AUTH = AuthConfig(secret="test-secret", expiry_seconds=3600)


@pytest.mark.asyncio
async def test_register_returns_token_for_new_user(uow):
    usecase = UserUseCase(uow, AUTH)
    out = await usecase.register(RegisterRequest(name="Dewi", email="dewi@test.test", password="pw"))
    assert out.user.email == "dewi@test.test"
    assert out.user.id > 0
    claims = decode_token(out.token, AUTH.secret)
    assert claims.user_id == out.user.id
    assert claims.email == "dewi@test.test"


@pytest.mark.asyncio
async def test_register_rejects_duplicate_email(uow, user_id):
    usecase = UserUseCase(uow, AUTH)
    with pytest.raises(UserError, match="email is already registered"):
        await usecase.register(RegisterRequest(name="Other", email="satrio@test.test", password="x"))


@pytest.mark.asyncio
async def test_register_requires_all_fields(uow):
    usecase = UserUseCase(uow, AUTH)
    with pytest.raises(UserError, match="Name, email, and password are required"):
        await usecase.register(RegisterRequest(name="", email="a@test.test", password="x"))


@pytest.mark.asyncio
async def test_login_with_correct_password(uow, user_id):
    usecase = UserUseCase(uow, AUTH)
    out = await usecase.login(LoginRequest(email="satrio@test.test", password="secret"))
    assert out.user.id == user_id
    assert out.user.name == "Satrio"
    assert decode_token(out.token, AUTH.secret).user_id == user_id


@pytest.mark.asyncio
async def test_login_wrong_password(uow, user_id):
    usecase = UserUseCase(uow, AUTH)
    with pytest.raises(UserError, match="invalid email or password"):
        await usecase.login(LoginRequest(email="satrio@test.test", password="nope"))


@pytest.mark.asyncio
async def test_login_unknown_email(uow):
    usecase = UserUseCase(uow, AUTH)
    with pytest.raises(UserError, match="email not exist"):
        await usecase.login(LoginRequest(email="ghost@test.test", password="x"))


@pytest.mark.asyncio
async def test_login_requires_fields(uow):
    usecase = UserUseCase(uow, AUTH)
    with pytest.raises(UserError, match="Email and password are required"):
        await usecase.login(LoginRequest(email="satrio@test.test"))
