"""
Shared route dependencies
"""
from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from jewelerp.core.database import get_db
from jewelerp.models import Organization
from jewelerp.services.organization_service import OrganizationService


def get_organization(organization_id: int, db: Session = Depends(get_db)) -> Organization:
    """Resolve the organization in the path; every scoped route goes through here"""
    organization = OrganizationService(db).get_by_id(organization_id)
    if not organization:
        raise HTTPException(status_code=404, detail="Organization not found")
    return organization
