"""Inventory API routes: products and their stock."""

from typing import Any

from fastapi import APIRouter, Body, status
from pydantic import BaseModel

from lifecycle.api.deps import ContainerDep
from lifecycle.application.commands import (
    AddProductCommand,
    AdjustStockCommand,
    GetProductQuery,
    ListLowStockProductsQuery,
    UpdateProductPriceCommand,
)
from lifecycle.application.dtos import ProductResponse
from lifecycle.application.parsing import parse_command

router = APIRouter(prefix="/products", tags=["products"])


class AdjustStockRequest(BaseModel):
    quantity: int
    reason: str


class UpdatePriceRequest(BaseModel):
    price: int


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Malformed product or invalid SKU"},
        409: {"description": "SKU already in use"},
    },
)
async def add_product(
    container: ContainerDep, payload: dict[str, Any] = Body(...)
) -> ProductResponse:
    # malformed payloads become domain validation errors (400)
    command = parse_command(AddProductCommand, payload).unwrap()
    return await container.add_product.execute(command)


@router.get("/low-stock", response_model=list[ProductResponse])
async def list_low_stock_products(container: ContainerDep) -> list[ProductResponse]:
    return await container.list_low_stock_products.execute(ListLowStockProductsQuery())


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, container: ContainerDep) -> ProductResponse:
    return await container.get_product.execute(GetProductQuery(product_id=product_id))


@router.post(
    "/{product_id}/stock",
    response_model=ProductResponse,
    responses={409: {"description": "Not enough stock"}},
)
async def adjust_stock(
    product_id: str, request: AdjustStockRequest, container: ContainerDep
) -> ProductResponse:
    command = parse_command(
        AdjustStockCommand, {"product_id": product_id, **request.model_dump()}
    ).unwrap()
    return await container.adjust_stock.execute(command)


@router.put("/{product_id}/price", response_model=ProductResponse)
async def update_product_price(
    product_id: str, request: UpdatePriceRequest, container: ContainerDep
) -> ProductResponse:
    return await container.update_product_price.execute(
        UpdateProductPriceCommand(product_id=product_id, price=request.price)
    )
