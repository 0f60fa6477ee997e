from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.db import get_db
from app.models import Registration

router = APIRouter(prefix="/dev", tags=["dev"])

DBSession = Annotated[Session, Depends(get_db)]

logger = structlog.get_logger(__name__)


class ClearedOut(BaseModel):
    message: str
    count: int


@router.delete("/registrations", response_model=ClearedOut)
def dev_clear_registrations(db: DBSession):
    result = db.execute(delete(Registration))
    db.commit()
    count = result.rowcount or 0
    logger.warning("dev_registrations_cleared", count=count)
    return ClearedOut(message=f"Deleted {count} registrations", count=count)
