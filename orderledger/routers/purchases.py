from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from orderledger.core.constants import MAX_ROW_ID
from orderledger.dependencies import get_db, require_auth
from orderledger.schemas.purchase import PurchaseRecordRead
from orderledger.services import list_purchase_records

router = APIRouter(prefix="/purchases", tags=["Purchases"], dependencies=[Depends(require_auth)])


@router.get("", response_model=List[PurchaseRecordRead])
def read_purchase_records(
    customer_id: Optional[int] = Query(None, gt=0, le=MAX_ROW_ID, description="Only purchases of this customer"),
    db: Session = Depends(get_db),
):
    return list_purchase_records(db, customer_id=customer_id)


__all__ = ["router"]
