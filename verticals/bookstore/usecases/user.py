"""Registration and login."""

import structlog
from opentelemetry import trace
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.errors import InternalError, UserError
from core.security import hash_password, issue_token, verify_password
from patterns.domain_config import AuthConfig
from verticals.bookstore.models.db_models import User
from verticals.bookstore.models.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from verticals.bookstore.repository import BookstoreRepositories, BookstoreUnitOfWork

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

EMAIL_TAKEN = "email is already registered"


class UserUseCase:
    def __init__(self, uow: BookstoreUnitOfWork, config: AuthConfig):
        self.uow = uow
        self.config = config

    def _token_for(self, user_id: int, email: str) -> str:
        return issue_token(user_id, email, self.config.secret, self.config.expiry_seconds)

    async def register(self, request: RegisterRequest) -> AuthResponse:
        with tracer.start_as_current_span("UserUseCase.register", record_exception=False) as span:
            if not request.name or not request.email or not request.password:
                raise UserError("Name, email, and password are required")

            hashed = hash_password(request.password)

            async def insert(repos: BookstoreRepositories) -> int:
                if await repos.users.get_by_email(request.email) is not None:
                    raise UserError(EMAIL_TAKEN)
                return await repos.users.create(
                    User(name=request.name, email=request.email, password=hashed)
                )

            try:
                user_id = await self.uow.run(insert)
            except IntegrityError as exc:
                # lost a race with a concurrent registration of the same email
                raise UserError(EMAIL_TAKEN) from exc
            except SQLAlchemyError as exc:
                span.record_exception(exc)
                raise InternalError("Database Error") from exc

            logger.info("user.registered", user_id=user_id)
            return AuthResponse(
                token=self._token_for(user_id, request.email),
                user=UserResponse(id=user_id, name=request.name, email=request.email),
            )

    async def login(self, request: LoginRequest) -> AuthResponse:
        with tracer.start_as_current_span("UserUseCase.login", record_exception=False) as span:
            if not request.email or not request.password:
                raise UserError("Email and password are required")

            try:
                async with self.uow.reader() as repos:
                    user = await repos.users.get_by_email(request.email)
            except SQLAlchemyError as exc:
                span.record_exception(exc)
                raise InternalError("Database Error") from exc

            if user is None:
                raise UserError("email not exist")
            if not verify_password(request.password, user.password):
                raise UserError("invalid email or password")

            return AuthResponse(
                token=self._token_for(user.id, user.email),
                user=UserResponse.model_validate(user),
            )
