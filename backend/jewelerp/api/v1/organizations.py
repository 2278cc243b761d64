"""
Organization API Routes
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jewelerp.api.deps import get_organization
from jewelerp.core.database import get_db
from jewelerp.models import Organization
from jewelerp.schemas import OrganizationCreate, OrganizationResponse
from jewelerp.services.organization_service import OrganizationService

router = APIRouter(prefix="/organizations", tags=["Organizations"])


@router.get("", response_model=List[OrganizationResponse])
async def list_organizations(db: Session = Depends(get_db)):
    return OrganizationService(db).get_all()


@router.post("", response_model=OrganizationResponse)
async def create_organization(
    organization_data: OrganizationCreate,
    db: Session = Depends(get_db)
):
    """Create an organization together with its default chart of accounts"""
    organization = OrganizationService(db).create(organization_data)
    db.commit()
    db.refresh(organization)
    return organization


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization_detail(organization: Organization = Depends(get_organization)):
    return organization
