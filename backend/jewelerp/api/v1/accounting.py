"""
Accounting API Routes - Chart of Accounts, Ledger Entries, Reports
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from jewelerp.api.deps import get_organization
from jewelerp.core.database import get_db
from jewelerp.models import Organization
from jewelerp.schemas import (
    LedgerAccountCreate, LedgerAccountUpdate, LedgerAccountResponse,
    LedgerEntryCreate, LedgerEntryResponse, TrialBalanceResponse, TrialBalanceRow,
    ProfitAndLossResponse, ItemProfitRow, BalanceDrift, MessageResponse
)
from jewelerp.services.export_service import XLSX_MEDIA_TYPE, trial_balance_workbook
from jewelerp.services.ledger_service import LedgerAccountService, LedgerService
from jewelerp.services.report_service import ReportService

router = APIRouter(prefix="/organizations/{organization_id}/accounting", tags=["Accounting"])


# ==================== CHART OF ACCOUNTS ====================

@router.get("/accounts", response_model=List[LedgerAccountResponse])
async def list_accounts(
    include_inactive: bool = False,
    account_type: Optional[str] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """List the chart of accounts"""
    return LedgerAccountService(db).get_by_organization(organization.id, include_inactive, account_type)


@router.post("/accounts", response_model=LedgerAccountResponse)
async def create_account(
    account_data: LedgerAccountCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Create a ledger account; a non-zero opening balance is posted against Opening Balance Equity"""
    try:
        account = LedgerAccountService(db).create(account_data, organization.id)
        db.commit()
        db.refresh(account)
        return account
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/accounts/{account_id}", response_model=LedgerAccountResponse)
async def get_account(
    account_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    account = LedgerAccountService(db).get_by_id(account_id, organization.id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return account


@router.put("/accounts/{account_id}", response_model=LedgerAccountResponse)
async def update_account(
    account_id: int,
    account_data: LedgerAccountUpdate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    try:
        account = LedgerAccountService(db).update(account_id, organization.id, account_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    db.commit()
    db.refresh(account)
    return account


@router.delete("/accounts/{account_id}", response_model=MessageResponse)
async def delete_account(
    account_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Delete an unused account; accounts with history are deactivated instead"""
    if not LedgerAccountService(db).delete(account_id, organization.id):
        raise HTTPException(status_code=404, detail="Account not found or is a system account")
    db.commit()
    return {"message": "Account deleted successfully"}


# ==================== LEDGER ENTRIES ====================

@router.get("/entries", response_model=List[LedgerEntryResponse])
async def list_entries(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[str] = None,
    reference_type: Optional[str] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return LedgerService(db).list_entries(organization.id, start_date, end_date, status, reference_type)


@router.post("/entries", response_model=LedgerEntryResponse)
async def post_entry(
    entry_data: LedgerEntryCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Post a balanced journal entry"""
    ledger_service = LedgerService(db)
    try:
        entry_id = ledger_service.post_entry(
            organization.id,
            entry_data.narration,
            entry_data.lines,
            entry_date=entry_data.entry_date,
            reference_type="manual",
            reference_number=entry_data.reference_number,
            created_by=entry_data.created_by,
        )
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    return ledger_service.get_entry(entry_id, organization.id)


@router.post("/entries/drafts", response_model=LedgerEntryResponse)
async def create_draft(
    entry_data: LedgerEntryCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Save an entry without moving balances"""
    ledger_service = LedgerService(db)
    try:
        entry_id = ledger_service.create_draft(
            organization.id,
            entry_data.narration,
            entry_data.lines,
            entry_date=entry_data.entry_date,
            reference_type="manual",
            reference_number=entry_data.reference_number,
            created_by=entry_data.created_by,
        )
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    return ledger_service.get_entry(entry_id, organization.id)


@router.get("/entries/{entry_id}", response_model=LedgerEntryResponse)
async def get_entry(
    entry_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    entry = LedgerService(db).get_entry(entry_id, organization.id)
    if not entry:
        raise HTTPException(status_code=404, detail="Ledger entry not found")
    return entry


@router.post("/entries/{entry_id}/post", response_model=LedgerEntryResponse)
async def post_draft(
    entry_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    try:
        entry = LedgerService(db).post_draft(entry_id, organization.id)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    if not entry:
        raise HTTPException(status_code=404, detail="Ledger entry not found")
    db.commit()
    db.refresh(entry)
    return entry


# ==================== REPORTS ====================

@router.get("/reports/trial-balance", response_model=TrialBalanceResponse)
async def trial_balance(
    as_of_date: Optional[date] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    report_service = ReportService(db)
    rows = report_service.trial_balance(organization.id, as_of_date)
    totals = report_service.trial_balance_totals(rows)
    return TrialBalanceResponse(
        as_of_date=as_of_date,
        rows=[
            TrialBalanceRow(
                account_id=row["account"].id,
                account_code=row["account"].account_code,
                account_name=row["account"].account_name,
                account_type=row["account"].account_type,
                debit_total=row["debit_total"],
                credit_total=row["credit_total"],
                balance=row["balance"],
            )
            for row in rows
        ],
        **totals
    )


@router.get("/reports/trial-balance/excel")
async def trial_balance_excel(
    as_of_date: Optional[date] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Download the trial balance as an Excel workbook"""
    report_service = ReportService(db)
    rows = report_service.trial_balance(organization.id, as_of_date)
    buffer = trial_balance_workbook(organization, rows, report_service.trial_balance_totals(rows), as_of_date)

    filename = f"trial_balance_{organization.id}_{(as_of_date or date.today()).strftime('%Y%m%d')}.xlsx"
    return StreamingResponse(
        buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/reports/profit-loss", response_model=ProfitAndLossResponse)
async def profit_and_loss(
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    if from_date and to_date and from_date > to_date:
        raise HTTPException(status_code=400, detail="from_date must not be after to_date")
    return ReportService(db).profit_and_loss(organization.id, from_date, to_date)


@router.get("/reports/general-ledger")
async def general_ledger(
    account_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return ReportService(db).general_ledger(organization.id, account_id, start_date, end_date)


@router.get("/reports/item-profit-loss", response_model=List[ItemProfitRow])
async def item_profit_loss(
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return ReportService(db).item_profit_loss(organization.id, from_date, to_date)


# ==================== BALANCE CHECKS ====================

@router.get("/balances/verify", response_model=List[BalanceDrift])
async def verify_balances(
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Accounts whose cached balance disagrees with their posted entries"""
    return LedgerService(db).verify_balances(organization.id)


@router.post("/balances/rebuild", response_model=MessageResponse)
async def rebuild_balances(
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    changed = LedgerService(db).rebuild_balances(organization.id)
    db.commit()
    return {"message": f"Rebuilt {changed} account balance(s)"}
