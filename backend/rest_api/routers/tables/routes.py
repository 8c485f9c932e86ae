"""
Tables router.
Landing endpoint for the QR code printed on each table.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from shared.config.constants import Limits
from shared.infrastructure.db import get_db
from shared.utils.schemas import TableScanResponse
from rest_api.services.domain import TableService


router = APIRouter(prefix="/api/tables", tags=["tables"])


@router.get("/scan/{number}", response_model=TableScanResponse)
def scan_table(
    number: int = Path(ge=Limits.MIN_TABLE_NUMBER, le=Limits.MAX_TABLE_NUMBER),
    db: Session = Depends(get_db),
) -> TableScanResponse:
    """Table status and open order count. 404 until the table's first order."""
    return TableScanResponse(table=TableService(db).scan(number))
