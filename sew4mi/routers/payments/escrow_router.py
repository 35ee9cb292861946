from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.core.db import get_db
from sew4mi.utils.check_roles import require_role
from sew4mi.utils.get_user import get_current_user
from sew4mi.utils.response import success_response, APIResponse
from sew4mi.utils.pdf_generators.escrow_statement_pdf import generate_escrow_statement_pdf

from sew4mi.services.payments.escrow_service import (
    record_deposit_payment,
    get_escrow_status,
    get_escrow_ledger,
    validate_escrow_state,
)

from sew4mi.schemas.payments.escrow_schemas import (
    DepositPaymentCreate,
    EscrowStatusOut,
    EscrowValidationOut,
)

router = APIRouter(
    prefix="/escrow",
    tags=["Escrow"],
)


@router.post("/orders/{order_id}/deposit", response_model=APIResponse[EscrowStatusOut])
async def record_deposit_api(
    order_id: int,
    payload: DepositPaymentCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    status = await record_deposit_payment(db, order_id, payload, user)
    return success_response("Deposit recorded", status)


@router.get("/orders/{order_id}", response_model=APIResponse[EscrowStatusOut])
async def get_escrow_status_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    status = await get_escrow_status(db, order_id, user)
    return success_response("Escrow status retrieved successfully", status)


@router.get("/orders/{order_id}/validate", response_model=APIResponse[EscrowValidationOut])
async def validate_escrow_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(["admin"])),
):
    result = await validate_escrow_state(db, order_id)
    return success_response("Escrow state checked", result)


@router.get("/orders/{order_id}/statement.pdf")
async def escrow_statement_pdf_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    order, transactions = await get_escrow_ledger(db, order_id, user)
    pdf = generate_escrow_statement_pdf(order, transactions)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="Escrow_{order.order_number}.pdf"'},
    )
