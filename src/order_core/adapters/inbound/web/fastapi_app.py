from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from returns.result import Success

from order_core.core.domain.model.cart import CartCalculation
from order_core.core.domain.model.errors import (
    DomainError,
    NotFound,
    PublishError,
    RepositoryError,
)
from order_core.core.domain.model.order_details import OrderPricing
from order_core.core.ports.inbound.apply_coupon import (
    ApplyCouponCommand,
    ApplyCouponUseCase,
)
from order_core.core.ports.inbound.calculate_cart import (
    CalculateCartCommand,
    CalculateCartUseCase,
    CartLine,
)
from order_core.core.ports.inbound.change_order_status import (
    CancelOrderCommand,
    ChangeOrderStatusCommand,
    ChangeOrderStatusUseCase,
)
from order_core.core.ports.inbound.create_order import (
    AddressInput,
    CreateOrderCommand,
    CreateOrderUseCase,
    CustomerInput,
    OrderLineInput,
)
from order_core.core.ports.inbound.get_order import (
    GetOrderQuery,
    GetOrderUseCase,
    OrderView,
)

logger = structlog.get_logger(__name__)

# ---- HTTP DTOs (adapter layer) ---------------------------------------------


class CartLineIn(BaseModel):
    sku_id: str = Field(min_length=1, examples=["9f1c3c9e-8d0b-4a43-9d1e-4d0f1f0a2b11"])
    quantity: int = Field(gt=0, examples=[2])


class CalculateCartRequest(BaseModel):
    items: list[CartLineIn] = Field(min_length=1)
    shipping_method_id: str | None = Field(None, examples=["standard"])
    payment_method_id: str | None = Field(None, examples=["cod"])
    coupon_code: str | None = Field(None, examples=["WELCOME10"])


class CartLineOut(BaseModel):
    sku_id: str
    product_id: str
    product_name: str
    unit_price: int
    quantity: int
    subtotal: int


class CartCalculationResponse(BaseModel):
    items: list[CartLineOut]
    item_count: int
    total_quantity: int
    coupon_code: str | None
    original_subtotal: int
    discount_amount: int
    final_subtotal: int
    tax_amount: int
    total_with_tax: int
    shipping_fee: int
    payment_fee: int
    grand_total: int


class ApplyCouponRequest(BaseModel):
    coupon_code: str = Field(min_length=1, examples=["WELCOME10"])
    items: list[CartLineIn] = Field(min_length=1)
    preview: bool = True


class CouponApplicationResponse(BaseModel):
    coupon_code: str
    subtotal: int
    discount_amount: int
    discounted_amount: int
    message: str
    usage_recorded: bool


class CustomerIn(BaseModel):
    first_name: str = Field(min_length=1, examples=["Taro"])
    last_name: str = Field(min_length=1, examples=["Yamada"])
    email: str = Field(min_length=1, examples=["taro@example.com"])
    phone: str = Field(min_length=1, examples=["090-1234-5678"])


class AddressIn(BaseModel):
    postal_code: str = Field(examples=["150-0001"])
    prefecture: str = Field(examples=["Tokyo"])
    city: str = Field(examples=["Shibuya"])
    street: str = Field(examples=["1-2-3 Jingumae"])
    building: str | None = None


class CreateOrderRequest(BaseModel):
    items: list[CartLineIn] = Field(min_length=1)
    customer: CustomerIn
    shipping_address: AddressIn
    shipping_method_id: str = Field(min_length=1, examples=["standard"])
    payment_method_id: str = Field(min_length=1, examples=["credit_card"])
    payment_details: str | None = None
    notes: str | None = None


class PricingOut(BaseModel):
    subtotal: int
    shipping_fee: int
    payment_fee: int
    tax_amount: int
    total: int


class OrderReceiptResponse(BaseModel):
    order_id: str
    order_number: str
    status: str
    pricing: PricingOut
    created_at: datetime


class OrderLineOut(BaseModel):
    sku_id: str
    sku_code: str
    product_name: str
    sku_name: str
    unit_price: int
    quantity: int
    subtotal: int


class OrderDetailsResponse(BaseModel):
    order_id: str
    order_number: str
    status: str
    customer_name: str
    customer_email: str
    shipping_method: str
    shipping_address: str
    payment_method: str
    lines: list[OrderLineOut]
    pricing: PricingOut
    created_at: datetime
    updated_at: datetime
    paid_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    notes: str | None = None


class ChangeStatusRequest(BaseModel):
    status: str = Field(min_length=1, examples=["paid"])


class CancelOrderRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=1000, examples=["customer request"])


class ErrorResponse(BaseModel):
    type: str
    message: str
    details: list[dict[str, Any]] | None = None


def _map_error_to_http(err: DomainError) -> tuple[int, ErrorResponse]:
    body = ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, NotFound):
        return 404, body

    if isinstance(err, PublishError):
        return 503, body

    if isinstance(err, RepositoryError):
        return 500, body

    # every other domain / input failure is the client's to fix
    return 400, body


def _pricing_out(p: OrderPricing) -> PricingOut:
    return PricingOut(
        subtotal=p.subtotal.yen,
        shipping_fee=p.shipping_fee.yen,
        payment_fee=p.payment_fee.yen,
        tax_amount=p.tax_amount.yen,
        total=p.total.yen,
    )


def _order_details(view: OrderView) -> OrderDetailsResponse:
    return OrderDetailsResponse(
        order_id=str(view.order_id),
        order_number=view.order_number.value,
        status=view.status.value,
        customer_name=view.customer_name,
        customer_email=view.customer_email,
        shipping_method=view.shipping_method,
        shipping_address=view.shipping_address,
        payment_method=view.payment_method,
        lines=[
            OrderLineOut(
                sku_id=ln.sku_id,
                sku_code=ln.sku_code,
                product_name=ln.product_name,
                sku_name=ln.sku_name,
                unit_price=ln.unit_price.yen,
                quantity=ln.quantity,
                subtotal=ln.subtotal.yen,
            )
            for ln in view.lines
        ],
        pricing=_pricing_out(view.pricing),
        created_at=view.created_at,
        updated_at=view.updated_at,
        paid_at=view.paid_at,
        shipped_at=view.shipped_at,
        delivered_at=view.delivered_at,
        cancelled_at=view.cancelled_at,
        notes=view.notes,
    )


def _calculation_fields(calc: CartCalculation) -> dict[str, int]:
    return {
        "original_subtotal": calc.original_subtotal.yen,
        "discount_amount": calc.discount_amount.yen,
        "final_subtotal": calc.final_subtotal.yen,
        "tax_amount": calc.tax_amount.yen,
        "total_with_tax": calc.total_with_tax.yen,
        "shipping_fee": calc.shipping_fee.yen,
        "payment_fee": calc.payment_fee.yen,
        "grand_total": calc.grand_total.yen,
    }


_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def create_app(
    calculate_cart_uc: CalculateCartUseCase,
    create_order_uc: CreateOrderUseCase,
    get_order_uc: GetOrderUseCase,
    change_status_uc: ChangeOrderStatusUseCase,
    apply_coupon_uc: ApplyCouponUseCase,
) -> FastAPI:
    app = FastAPI(title="order_core")

    # --- exception handlers ----------------------------------------------------

    @app.exception_handler(DomainError)
    async def handle_domain_error(_: Request, exc: DomainError) -> JSONResponse:
        status, body = _map_error_to_http(exc)
        return JSONResponse(status_code=status, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        body = ErrorResponse(
            type="RequestValidationError",
            message="invalid request",
            details=[
                {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
                for e in exc.errors()
            ],
        )
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", error_type=type(exc).__name__)
        body = ErrorResponse(type=type(exc).__name__, message="internal server error")
        return JSONResponse(status_code=500, content=body.model_dump())

    # --- routes --------------------------------------------------------------

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(
        "/cart/calculate",
        response_model=CartCalculationResponse,
        responses=_ERROR_RESPONSES,
    )
    def calculate_cart(req: CalculateCartRequest) -> Any:
        cmd = CalculateCartCommand(
            items=tuple(CartLine(ln.sku_id, ln.quantity) for ln in req.items),
            shipping_method_id=req.shipping_method_id,
            payment_method_id=req.payment_method_id,
            coupon_code=req.coupon_code,
        )
        result = calculate_cart_uc.calculate_cart(cmd)

        if isinstance(result, Success):
            res = result.unwrap()
            return CartCalculationResponse(
                items=[
                    CartLineOut(
                        sku_id=str(v.sku_id),
                        product_id=str(v.product_id),
                        product_name=v.product_name.value,
                        unit_price=v.unit_price.yen,
                        quantity=v.quantity,
                        subtotal=v.subtotal.yen,
                    )
                    for v in res.items
                ],
                item_count=res.item_count,
                total_quantity=res.total_quantity,
                coupon_code=res.coupon_code,
                **_calculation_fields(res.calculation),
            )

        raise result.failure()

    @app.post(
        "/coupons/apply",
        response_model=CouponApplicationResponse,
        responses=_ERROR_RESPONSES,
    )
    def apply_coupon(req: ApplyCouponRequest) -> Any:
        cmd = ApplyCouponCommand(
            coupon_code=req.coupon_code,
            items=tuple(CartLine(ln.sku_id, ln.quantity) for ln in req.items),
            preview=req.preview,
        )
        result = apply_coupon_uc.apply_coupon(cmd)

        if isinstance(result, Success):
            app_ = result.unwrap()
            return CouponApplicationResponse(
                coupon_code=app_.coupon_code,
                subtotal=app_.subtotal.yen,
                discount_amount=app_.discount_amount.yen,
                discounted_amount=app_.discounted_amount.yen,
                message=app_.message,
                usage_recorded=app_.usage_recorded,
            )

        raise result.failure()

    @app.post(
        "/orders",
        response_model=OrderReceiptResponse,
        status_code=201,
        responses={**_ERROR_RESPONSES, 503: {"model": ErrorResponse}},
    )
    def create_order(req: CreateOrderRequest, response: Response) -> Any:
        cmd = CreateOrderCommand(
            items=tuple(OrderLineInput(ln.sku_id, ln.quantity) for ln in req.items),
            customer=CustomerInput(
                first_name=req.customer.first_name,
                last_name=req.customer.last_name,
                email=req.customer.email,
                phone=req.customer.phone,
            ),
            shipping_address=AddressInput(
                postal_code=req.shipping_address.postal_code,
                prefecture=req.shipping_address.prefecture,
                city=req.shipping_address.city,
                street=req.shipping_address.street,
                building=req.shipping_address.building,
            ),
            shipping_method_id=req.shipping_method_id,
            payment_method_id=req.payment_method_id,
            payment_details=req.payment_details,
            notes=req.notes,
        )
        result = create_order_uc.create_order(cmd)

        if isinstance(result, Success):
            receipt = result.unwrap()
            order_id = str(receipt.order_id)
            response.headers["Location"] = f"/orders/{order_id}"
            return OrderReceiptResponse(
                order_id=order_id,
                order_number=receipt.order_number.value,
                status=receipt.status.value,
                pricing=_pricing_out(receipt.pricing),
                created_at=receipt.created_at,
            )

        raise result.failure()

    @app.get(
        "/orders/{order_id}",
        response_model=OrderDetailsResponse,
        responses=_ERROR_RESPONSES,
    )
    def get_order(order_id: str) -> Any:
        result = get_order_uc.get_order(GetOrderQuery(order_id=order_id))

        if isinstance(result, Success):
            return _order_details(result.unwrap())

        raise result.failure()

    @app.post(
        "/orders/{order_id}/status",
        response_model=OrderDetailsResponse,
        responses={**_ERROR_RESPONSES, 503: {"model": ErrorResponse}},
    )
    def change_status(order_id: str, req: ChangeStatusRequest) -> Any:
        result = change_status_uc.change_status(
            ChangeOrderStatusCommand(order_id=order_id, status=req.status)
        )

        if isinstance(result, Success):
            return _order_details(result.unwrap())

        raise result.failure()

    @app.post(
        "/orders/{order_id}/cancel",
        response_model=OrderDetailsResponse,
        responses={**_ERROR_RESPONSES, 503: {"model": ErrorResponse}},
    )
    def cancel_order(order_id: str, req: CancelOrderRequest) -> Any:
        result = change_status_uc.cancel(
            CancelOrderCommand(order_id=order_id, reason=req.reason)
        )

        if isinstance(result, Success):
            return _order_details(result.unwrap())

        raise result.failure()

    return app
