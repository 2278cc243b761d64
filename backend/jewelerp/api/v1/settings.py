"""
Settings API Routes - Data reset and factory reset
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from jewelerp.api.deps import get_organization
from jewelerp.core.config import settings
from jewelerp.core.database import get_db
from jewelerp.models import Organization
from jewelerp.schemas import ResetResponse
from jewelerp.services.reset_service import ResetService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/organizations/{organization_id}/settings", tags=["Settings"])


@router.post("/reset-data", response_model=ResetResponse)
async def reset_data(
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Delete every transaction of the organization and zero stock and balances.

    Masters (items, customers, suppliers, accounts) are kept. Each table is
    committed separately, so a failure reports the tables already cleared.
    """
    return ResetService(db).reset_transactional_data(organization.id)


@router.post("/factory-reset", response_model=ResetResponse)
async def factory_reset(
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Delete transactions and masters, then restore the default chart of accounts"""
    if not settings.ALLOW_FACTORY_RESET:
        logger.warning(f"Factory reset refused for organization {organization.id}: disabled by configuration")
        raise HTTPException(status_code=403, detail="Factory reset is disabled")
    return ResetService(db).factory_reset(organization.id)
