"""
Payments API routes.

Thin layer over PaymentOperationsService: parse the request, run one use case,
wrap the result in the unified response. No gateway details here.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from api.dependencies import get_payment_operations
from application.dtos.payments import (
    AuthorizeRequest,
    CaptureRequest,
    CreatePaymentMethodRequest,
    CreatePaymentRequest,
    PaymentMethodOut,
    PaymentOut,
    RefundRequest,
)
from application.services.payment_operations import PaymentOperationsService
from core.response import Response as ApiResponse, success_response


router = APIRouter(prefix="/payments", tags=["Payments"])
methods_router = APIRouter(prefix="/payment-methods", tags=["Payment Methods"])


@router.post("", response_model=ApiResponse[PaymentOut], status_code=201)
async def create_payment(
    body: CreatePaymentRequest,
    service: PaymentOperationsService = Depends(get_payment_operations),
):
    return success_response(data=await service.create_payment(body))


@router.get("/{payment_id}", response_model=ApiResponse[PaymentOut])
async def get_payment(
    payment_id: int = Path(ge=1),
    service: PaymentOperationsService = Depends(get_payment_operations),
):
    return success_response(data=await service.get_payment(payment_id))


@router.post("/{payment_id}/authorize", response_model=ApiResponse[PaymentOut])
async def authorize_payment(
    body: AuthorizeRequest,
    payment_id: int = Path(ge=1),
    service: PaymentOperationsService = Depends(get_payment_operations),
):
    """Authorize the payment amount on the card; `capture=true` also captures it."""
    return success_response(data=await service.authorize(payment_id, body))


@router.post("/{payment_id}/capture", response_model=ApiResponse[PaymentOut])
async def capture_payment(
    body: CaptureRequest | None = None,
    payment_id: int = Path(ge=1),
    service: PaymentOperationsService = Depends(get_payment_operations),
):
    return success_response(data=await service.capture(payment_id, body or CaptureRequest()))


@router.post("/{payment_id}/void", response_model=ApiResponse[PaymentOut])
async def void_payment(
    payment_id: int = Path(ge=1),
    service: PaymentOperationsService = Depends(get_payment_operations),
):
    return success_response(data=await service.void(payment_id))


@router.post("/{payment_id}/refund", response_model=ApiResponse[PaymentOut])
async def refund_payment(
    body: RefundRequest | None = None,
    payment_id: int = Path(ge=1),
    service: PaymentOperationsService = Depends(get_payment_operations),
):
    """Refund part or all of a captured payment; omit `amount` for the remaining balance."""
    return success_response(data=await service.refund(payment_id, body or RefundRequest()))


@methods_router.post("", response_model=ApiResponse[PaymentMethodOut], status_code=201)
async def create_payment_method(
    body: CreatePaymentMethodRequest,
    service: PaymentOperationsService = Depends(get_payment_operations),
):
    return success_response(data=await service.create_payment_method(body))


@methods_router.delete("/{method_id}", response_model=ApiResponse[None])
async def delete_payment_method(
    method_id: int = Path(ge=1),
    service: PaymentOperationsService = Depends(get_payment_operations),
):
    await service.delete_payment_method(method_id)
    return success_response()
