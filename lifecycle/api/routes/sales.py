"""Sales API routes: orders, payments and shipping."""

from datetime import datetime

from fastapi import APIRouter, status
from pydantic import BaseModel

from lifecycle.api.deps import ContainerDep
from lifecycle.application.commands import (
    CancelOrderCommand,
    ComparePaymentFeesQuery,
    DeliverOrderCommand,
    GetOrderQuery,
    ListCustomerOrdersQuery,
    PayOrderCommand,
    PlaceOrderCommand,
    ShipOrderCommand,
)
from lifecycle.application.dtos import FeeQuoteResponse, OrderResponse, PaymentResponse

router = APIRouter(prefix="/orders", tags=["orders"])


class PayOrderRequest(BaseModel):
    payment_method: str


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class ShipOrderRequest(BaseModel):
    tracking_number: str
    carrier: str
    estimated_delivery: datetime | None = None


@router.post(
    "/",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid order items"}},
)
async def place_order(
    command: PlaceOrderCommand, container: ContainerDep
) -> OrderResponse:
    return await container.place_order.execute(command)


@router.get("/fees", response_model=list[FeeQuoteResponse])
async def compare_payment_fees(
    amount: int, container: ContainerDep, currency: str | None = None
) -> list[FeeQuoteResponse]:
    return await container.compare_payment_fees.execute(
        ComparePaymentFeesQuery(amount=amount, currency=currency)
    )


@router.get("/customer/{customer_id}", response_model=list[OrderResponse])
async def list_customer_orders(
    customer_id: str, container: ContainerDep
) -> list[OrderResponse]:
    return await container.list_customer_orders.execute(
        ListCustomerOrdersQuery(customer_id=customer_id)
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, container: ContainerDep) -> OrderResponse:
    return await container.get_order.execute(GetOrderQuery(order_id=order_id))


@router.post(
    "/{order_id}/pay",
    response_model=PaymentResponse,
    responses={
        400: {"description": "Unsupported payment method"},
        409: {"description": "Order already paid or cancelled"},
    },
)
async def pay_order(
    order_id: str, request: PayOrderRequest, container: ContainerDep
) -> PaymentResponse:
    return await container.pay_order.execute(
        PayOrderCommand(order_id=order_id, payment_method=request.payment_method)
    )


@router.post(
    "/{order_id}/cancel",
    response_model=OrderResponse,
    responses={409: {"description": "Order already paid or cancelled"}},
)
async def cancel_order(
    order_id: str, request: CancelOrderRequest, container: ContainerDep
) -> OrderResponse:
    return await container.cancel_order.execute(
        CancelOrderCommand(order_id=order_id, reason=request.reason)
    )


@router.post(
    "/{order_id}/ship",
    response_model=OrderResponse,
    responses={409: {"description": "Order is not paid"}},
)
async def ship_order(
    order_id: str, request: ShipOrderRequest, container: ContainerDep
) -> OrderResponse:
    return await container.ship_order.execute(
        ShipOrderCommand(order_id=order_id, **request.model_dump())
    )


@router.post(
    "/{order_id}/deliver",
    response_model=OrderResponse,
    responses={409: {"description": "Order is not shipped"}},
)
async def deliver_order(order_id: str, container: ContainerDep) -> OrderResponse:
    return await container.deliver_order.execute(DeliverOrderCommand(order_id=order_id))
