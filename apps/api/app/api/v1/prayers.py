from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.schemas import PublicPrayerOut
from app.db import get_db
from app.services.prayers_service import list_open_prayers

router = APIRouter(prefix="/prayers", tags=["prayers"])

DBSession = Annotated[Session, Depends(get_db)]


@router.get("", response_model=list[PublicPrayerOut])
def list_public_prayers(db: DBSession):
    return [PublicPrayerOut(**item) for item in list_open_prayers(db)]
