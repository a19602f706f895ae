from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.routes.auth.auth import get_current_user
from app.services.analytics_service import analytics_service

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/kpi")
async def get_kpis(
    current_user: dict = Depends(get_current_user),
):
    """
    Revenue, GST, expenses and net profit for this month,
    each with its percentage change from last month.
    """
    try:
        kpis = await analytics_service.get_kpis()
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch KPI data: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": kpis}),
    )


@router.get("/revenue-chart")
async def get_revenue_chart(
    current_user: dict = Depends(get_current_user),
):
    try:
        chart = await analytics_service.get_revenue_chart()
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch chart data: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": chart}),
    )


@router.get("/daily-income")
async def get_daily_income(
    current_user: dict = Depends(get_current_user),
):
    try:
        income = await analytics_service.get_daily_income()
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch daily income: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": income}),
    )


@router.get("/expense-breakdown")
async def get_expense_breakdown(
    current_user: dict = Depends(get_current_user),
):
    try:
        breakdown = await analytics_service.get_expense_breakdown()
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch expense breakdown: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": breakdown}),
    )


@router.get("/employee-performance")
async def get_employee_performance(
    current_user: dict = Depends(get_current_user),
):
    """Completed-task value against salary for each employee this month."""
    try:
        performance = await analytics_service.get_employee_performance()
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch employee performance: {exc}",
        ) from exc

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": performance}),
    )
