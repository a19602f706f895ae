"""
Expense API Routes
Expense CRUD, monthly report and upcoming recurring payments
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.models.expense import ExpenseCreate, ExpenseUpdate
from app.routes.auth.auth import get_current_user
from app.services.expense_service import expense_service

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("")
async def list_expenses(
    current_user: dict = Depends(get_current_user),
):
    """All expenses, newest first."""
    try:
        expenses = await expense_service.list_expenses()
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch expenses: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": expenses}, by_alias=False),
    )


@router.post("")
async def create_expense(
    body: ExpenseCreate,
    current_user: dict = Depends(get_current_user),
):
    """Create an expense; recurring ones get their next due date filled in."""
    try:
        expense = await expense_service.create_expense(body)
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create expense: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": expense}, by_alias=False),
    )


@router.get("/report")
async def get_monthly_report(
    month: Optional[int] = Query(default=None, ge=1, le=12),
    year: Optional[int] = Query(default=None, ge=1970),
    current_user: dict = Depends(get_current_user),
):
    """Monthly totals by category. Defaults to the current month."""
    today = date.today()
    try:
        report = await expense_service.get_monthly_report(
            month=month or today.month,
            year=year or today.year,
        )
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to build monthly report: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": report}, by_alias=False),
    )


@router.get("/upcoming")
async def get_upcoming_recurring_expenses(
    current_user: dict = Depends(get_current_user),
):
    try:
        expenses = await expense_service.get_upcoming_recurring_expenses()
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch upcoming expenses: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": expenses}, by_alias=False),
    )


@router.get("/total")
async def get_total_expenses(
    current_user: dict = Depends(get_current_user),
):
    try:
        total = await expense_service.get_total_expenses()
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to total expenses: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": {"total": total}}),
    )


@router.get("/{expense_id}")
async def get_expense(
    expense_id: str,
    current_user: dict = Depends(get_current_user),
):
    try:
        expense = await expense_service.get_expense(expense_id)
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch expense: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": expense}, by_alias=False),
    )


@router.put("/{expense_id}")
async def update_expense(
    expense_id: str,
    body: ExpenseUpdate,
    current_user: dict = Depends(get_current_user),
):
    """Update an expense. Changing its schedule recomputes the next due date."""
    try:
        expense = await expense_service.update_expense(expense_id, body)
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update expense: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": expense}, by_alias=False),
    )


@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: str,
    current_user: dict = Depends(get_current_user),
):
    try:
        await expense_service.delete_expense(expense_id)
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete expense: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "message": "Expense deleted"}),
    )
