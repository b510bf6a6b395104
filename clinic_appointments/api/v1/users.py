from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_secretary_user
from ...services.auth_service import AuthService
from ...schemas.appointment import PractitionerSummary

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(get_secretary_user)],
)

@router.get("/practitioners", response_model=List[PractitionerSummary])
async def list_practitioners(db: Session = Depends(get_db)):
    """Active doctors available for booking."""
    return AuthService(db).list_practitioners()
