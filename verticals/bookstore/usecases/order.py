"""Order placement and listing.

``create_order`` is the transactional write path: the order header and every
item are written inside one unit-of-work, each referenced book is looked up
before its item is inserted, and any failure rolls the whole order back.
Items are processed sequentially in submission order.
"""

from datetime import datetime, timezone

import structlog
from opentelemetry import trace
from sqlalchemy.exc import SQLAlchemyError

from core.errors import InternalError, UserError
from patterns.domain_config import OrderConfig
from patterns.workflow_states import OrderStatus, advance
from verticals.bookstore.models.db_models import Order, OrderItem
from verticals.bookstore.models.schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    OrderItemIn,
    OrderResponse,
)
from verticals.bookstore.repository import BookstoreRepositories, BookstoreUnitOfWork
from verticals.bookstore.rules import validate_order_items

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

# Headers are persisted already advanced; there is no pending state.
PLACED_STATUS = advance(OrderStatus.CREATED, OrderStatus.SUCCESS)


class OrderUseCase:
    def __init__(self, uow: BookstoreUnitOfWork, config: OrderConfig | None = None):
        self.uow = uow
        self.config = config or OrderConfig()

    async def create_order(
        self, request: CreateOrderRequest, user_id: int
    ) -> CreateOrderResponse:
        """Place an order for ``user_id``.

        Raises UserError for invalid input or an unknown book, InternalError
        for storage failures. Nothing is persisted unless every item is.
        """
        with tracer.start_as_current_span("OrderUseCase.create_order", record_exception=False) as span:
            span.set_attribute("order.user_id", user_id)
            span.set_attribute("order.item_count", len(request.items))

            checks = validate_order_items(request.items, self.config.max_items_per_order)
            if not checks.all_passed:
                raise UserError(checks.first_failure.message)

            items = list(request.items)

            async def place(repos: BookstoreRepositories) -> int:
                try:
                    order_id = await repos.orders.create(
                        Order(user_id=user_id, status=PLACED_STATUS.value)
                    )
                except SQLAlchemyError as exc:
                    span.record_exception(exc)
                    raise InternalError("Database Error") from exc

                for item in items:
                    await self._add_item(repos, order_id, item, span)
                return order_id

            order_id = await self.uow.run(place)

            logger.info(
                "order.created",
                order_id=order_id,
                user_id=user_id,
                items=len(items),
            )
            return CreateOrderResponse(
                order_id=order_id,
                items=items,
                status=PLACED_STATUS.value,
                created_at=datetime.now(timezone.utc),
            )

    async def _add_item(
        self,
        repos: BookstoreRepositories,
        order_id: int,
        item: OrderItemIn,
        span: trace.Span,
    ) -> None:
        try:
            book = await repos.books.get_by_id(item.book_id)
        except SQLAlchemyError as exc:
            span.record_exception(exc)
            raise InternalError("Database Error") from exc

        if book is None:
            logger.info("order.unknown_book", order_id=order_id, book_id=item.book_id)
            raise UserError("Book ID Not Found")

        try:
            await repos.order_items.create(
                OrderItem(order_id=order_id, book_id=item.book_id, quantity=item.quantity)
            )
        except SQLAlchemyError as exc:
            span.record_exception(exc)
            raise InternalError("Database Error") from exc

    async def get_orders(
        self, user_id: int, limit: int | None = None, offset: int = 0
    ) -> list[OrderResponse]:
        """List a user's orders, newest first, each with its items.

        Not atomic across orders; a storage failure returns nothing.
        """
        if limit is None:
            limit = self.config.default_page_size
        if limit < 1 or limit > self.config.max_page_size:
            raise UserError(f"limit must be between 1 and {self.config.max_page_size}")
        if offset < 0:
            raise UserError("offset must not be negative")

        with tracer.start_as_current_span("OrderUseCase.get_orders", record_exception=False) as span:
            span.set_attribute("order.user_id", user_id)
            try:
                async with self.uow.reader() as repos:
                    orders = await repos.orders.list_by_user(user_id, limit, offset)
                    output = []
                    for order in orders:
                        rows = await repos.order_items.list_by_order(order.id)
                        output.append(
                            OrderResponse(
                                order_id=order.id,
                                items=[
                                    OrderItemIn(book_id=r.book_id, quantity=r.quantity)
                                    for r in rows
                                ],
                                status=order.status,
                                created_at=order.created_at,
                            )
                        )
            except SQLAlchemyError as exc:
                span.record_exception(exc)
                logger.error("order.list_failed", user_id=user_id, error=str(exc))
                raise InternalError("Database Error") from exc

            return output
