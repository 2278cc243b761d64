"""
Ledger Service - Chart of Accounts and double-entry posting
"""
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, NamedTuple, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from jewelerp.core.exceptions import PersistenceError, ValidationError
from jewelerp.models import LedgerAccount, LedgerEntry, LedgerEntryDetail, EntryStatus
from jewelerp.schemas import LedgerAccountCreate, LedgerAccountUpdate, LedgerLineCreate
from jewelerp.services.organization_service import SystemAccount
from jewelerp.services.utils import ZERO, CENT, to_decimal, next_document_number

logger = logging.getLogger(__name__)


class PostingLine(NamedTuple):
    account_id: int
    debit: Decimal
    credit: Decimal
    narration: Optional[str]


def _line_fields(line, index: int):
    if isinstance(line, LedgerLineCreate):
        return line.account_id, line.debit, line.credit, line.narration
    if isinstance(line, PostingLine):
        return line.account_id, line.debit, line.credit, line.narration
    if isinstance(line, dict):
        return line.get("account_id"), line.get("debit"), line.get("credit"), line.get("narration")
    raise ValidationError(f"Line {index}: unsupported line type {type(line).__name__}", field=f"lines[{index}]")


def _parse_amount(value, index: int, side: str) -> Optional[Decimal]:
    """None and zero both mean 'side not set'"""
    if value is None:
        return None
    field = f"lines[{index}].{side}"
    if isinstance(value, bool):
        raise ValidationError(f"Line {index}: {side} is not a valid amount", field=field)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Line {index}: {side} is not a valid amount", field=field)
    if not amount.is_finite():
        raise ValidationError(f"Line {index}: {side} is not a valid amount", field=field)
    if amount < 0:
        raise ValidationError(f"Line {index}: {side} cannot be negative", field=field)
    if amount != amount.quantize(CENT):
        raise ValidationError(f"Line {index}: {side} has more than two decimal places", field=field)
    if amount == 0:
        return None
    return amount


def validate_lines(lines: Iterable) -> List[PostingLine]:
    """Check posting lines without touching the database.

    Every line needs an account and exactly one positive side, and the
    debit and credit columns must add up to the same Decimal.
    """
    lines = list(lines or [])
    if not lines:
        raise ValidationError("A ledger entry needs at least one line", field="lines")

    validated = []
    for index, line in enumerate(lines):
        account_id, debit, credit, narration = _line_fields(line, index)
        if account_id is None:
            raise ValidationError(f"Line {index}: account_id is required", field=f"lines[{index}].account_id")

        debit = _parse_amount(debit, index, "debit")
        credit = _parse_amount(credit, index, "credit")
        if debit is not None and credit is not None:
            raise ValidationError(f"Line {index}: set either debit or credit, not both", field=f"lines[{index}]")
        if debit is None and credit is None:
            raise ValidationError(f"Line {index}: debit or credit is required", field=f"lines[{index}]")

        validated.append(PostingLine(account_id, debit or ZERO, credit or ZERO, narration))

    total_debit = sum((line.debit for line in validated), ZERO)
    total_credit = sum((line.credit for line in validated), ZERO)
    if total_debit != total_credit:
        raise ValidationError(
            f"Debits ({total_debit}) must equal credits ({total_credit})", field="lines"
        )
    return validated


class LedgerAccountService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, account_id: int, organization_id: int) -> Optional[LedgerAccount]:
        return self.db.query(LedgerAccount).filter(
            LedgerAccount.id == account_id,
            LedgerAccount.organization_id == organization_id
        ).first()

    def get_by_code(self, code: str, organization_id: int) -> Optional[LedgerAccount]:
        return self.db.query(LedgerAccount).filter(
            LedgerAccount.account_code == code,
            LedgerAccount.organization_id == organization_id
        ).first()

    def get_by_organization(self, organization_id: int, include_inactive: bool = False,
                            account_type: str = None) -> List[LedgerAccount]:
        query = self.db.query(LedgerAccount).filter(LedgerAccount.organization_id == organization_id)
        if not include_inactive:
            query = query.filter(LedgerAccount.is_active == True)
        if account_type:
            query = query.filter(LedgerAccount.account_type == account_type)
        return query.order_by(LedgerAccount.account_code).all()

    def get_system_account(self, organization_id: int, code: str) -> LedgerAccount:
        """Resolve a system account; a missing one means the chart was never seeded"""
        account = self.get_by_code(code, organization_id)
        if not account or not account.is_active:
            raise ValidationError(
                f"System account {code} is missing or inactive for organization {organization_id}"
            )
        return account

    def get_settlement_account(self, organization_id: int, payment_mode: str) -> LedgerAccount:
        """Cash-in-hand for cash, the bank account for every other mode"""
        if hasattr(payment_mode, 'value'):
            payment_mode = payment_mode.value
        if payment_mode == "credit":
            raise ValidationError("Credit is not a settlement mode", field="payment_mode")
        code = SystemAccount.CASH if payment_mode == "cash" else SystemAccount.BANK
        return self.get_system_account(organization_id, code)

    def create(self, account_data: LedgerAccountCreate, organization_id: int) -> LedgerAccount:
        account_type = account_data.account_type
        if hasattr(account_type, 'value'):
            account_type = account_type.value

        code = account_data.account_code or next_document_number(
            self.db, LedgerAccount, "account_code", organization_id, "ACC"
        )
        if self.get_by_code(code, organization_id):
            raise ValidationError(f"Account with code '{code}' already exists", field="account_code")

        if account_data.parent_account_id and not self.get_by_id(account_data.parent_account_id, organization_id):
            raise ValidationError("Parent account not found", field="parent_account_id")

        opening_balance = to_decimal(account_data.opening_balance)

        account = LedgerAccount(
            organization_id=organization_id,
            account_code=code,
            account_name=account_data.account_name,
            account_type=account_type,
            account_group=account_data.account_group,
            parent_account_id=account_data.parent_account_id,
            description=account_data.description,
            opening_balance=opening_balance,
            current_balance=ZERO,
            is_system_account=False,
            is_active=True,
        )
        self.db.add(account)
        self.db.flush()

        if opening_balance != 0:
            self._post_opening_balance(account, opening_balance)

        return account

    def _post_opening_balance(self, account: LedgerAccount, opening_balance: Decimal):
        """Balance the opening amount against Opening Balance Equity"""
        equity = self.get_system_account(account.organization_id, SystemAccount.OPENING_BALANCE_EQUITY)
        amount = abs(opening_balance)
        debit_account = account.is_debit_normal == (opening_balance > 0)

        lines = [
            {"account_id": account.id, "debit" if debit_account else "credit": amount},
            {"account_id": equity.id, "credit" if debit_account else "debit": amount},
        ]
        LedgerService(self.db).post_entry(
            account.organization_id,
            f"Opening balance: {account.account_name}",
            lines,
            reference_type="opening",
            reference_id=account.id,
        )

    def update(self, account_id: int, organization_id: int, account_data: LedgerAccountUpdate) -> Optional[LedgerAccount]:
        account = self.get_by_id(account_id, organization_id)
        if not account:
            return None

        update_data = account_data.model_dump(exclude_unset=True)
        if account.is_system_account and update_data.get("is_active") is False:
            raise ValidationError("System accounts cannot be deactivated", field="is_active")

        for key, value in update_data.items():
            setattr(account, key, value)

        self.db.flush()
        return account

    def delete(self, account_id: int, organization_id: int) -> bool:
        account = self.get_by_id(account_id, organization_id)
        if not account or account.is_system_account:
            return False

        # Accounts with history are only deactivated
        has_details = self.db.query(LedgerEntryDetail.id).filter(
            LedgerEntryDetail.account_id == account_id
        ).first()

        if has_details:
            account.is_active = False
        else:
            self.db.delete(account)

        self.db.flush()
        return True


class LedgerService:
    def __init__(self, db: Session):
        self.db = db

    def get_entry(self, entry_id: int, organization_id: int) -> Optional[LedgerEntry]:
        return self.db.query(LedgerEntry).options(
            joinedload(LedgerEntry.details)
        ).filter(
            LedgerEntry.id == entry_id,
            LedgerEntry.organization_id == organization_id
        ).first()

    def list_entries(self, organization_id: int, start_date: date = None, end_date: date = None,
                     status: str = None, reference_type: str = None) -> List[LedgerEntry]:
        query = self.db.query(LedgerEntry).options(
            joinedload(LedgerEntry.details)
        ).filter(LedgerEntry.organization_id == organization_id)

        if start_date:
            query = query.filter(LedgerEntry.entry_date >= start_date)
        if end_date:
            query = query.filter(LedgerEntry.entry_date <= end_date)
        if status:
            query = query.filter(LedgerEntry.status == status)
        if reference_type:
            query = query.filter(LedgerEntry.reference_type == reference_type)

        return query.order_by(LedgerEntry.entry_date.desc(), LedgerEntry.id.desc()).all()

    def get_next_number(self, organization_id: int) -> str:
        return next_document_number(self.db, LedgerEntry, "entry_number", organization_id, "LE")

    def post_entry(self, organization_id: int, narration: Optional[str], lines: Iterable,
                   entry_date: date = None, reference_type: str = None, reference_id: int = None,
                   reference_number: str = None, created_by: str = None) -> int:
        """Validate and post a balanced entry; returns the new entry id"""
        entry = self._create_entry(
            organization_id, narration, lines, EntryStatus.POSTED.value,
            entry_date, reference_type, reference_id, reference_number, created_by
        )
        logger.info(
            f"Posted ledger entry {entry.entry_number} for organization {organization_id} "
            f"(total {entry.total_amount})"
        )
        return entry.id

    def create_draft(self, organization_id: int, narration: Optional[str], lines: Iterable,
                     entry_date: date = None, reference_type: str = None, reference_id: int = None,
                     reference_number: str = None, created_by: str = None) -> int:
        """Save a validated entry without touching account balances"""
        entry = self._create_entry(
            organization_id, narration, lines, EntryStatus.DRAFT.value,
            entry_date, reference_type, reference_id, reference_number, created_by
        )
        return entry.id

    def post_draft(self, entry_id: int, organization_id: int) -> Optional[LedgerEntry]:
        entry = self.get_entry(entry_id, organization_id)
        if not entry:
            return None
        if entry.is_posted:
            raise ValidationError(f"Entry {entry.entry_number} is already posted")

        validated = validate_lines([
            PostingLine(d.account_id, to_decimal(d.debit_amount), to_decimal(d.credit_amount), d.narration)
            for d in entry.details
        ])
        accounts = self._load_accounts(organization_id, {line.account_id for line in validated})

        try:
            self._apply_balances(validated, accounts)
            entry.status = EntryStatus.POSTED.value
            entry.posted_at = datetime.utcnow()
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Posting draft {entry_id} failed at update ledger_accounts: {e}")
            raise PersistenceError(str(e), "update ledger_accounts") from e

        logger.info(f"Posted draft ledger entry {entry.entry_number} for organization {organization_id}")
        return entry

    def _create_entry(self, organization_id, narration, lines, status, entry_date,
                      reference_type, reference_id, reference_number, created_by) -> LedgerEntry:
        validated = validate_lines(lines)
        accounts = self._load_accounts(organization_id, {line.account_id for line in validated})
        total = sum((line.debit for line in validated), ZERO)

        step = "insert ledger_entries"
        try:
            entry = LedgerEntry(
                organization_id=organization_id,
                entry_number=self.get_next_number(organization_id),
                entry_date=entry_date or date.today(),
                narration=narration,
                status=status,
                reference_type=reference_type,
                reference_id=reference_id,
                reference_number=reference_number,
                total_amount=total,
                created_by=created_by,
                posted_at=datetime.utcnow() if status == EntryStatus.POSTED.value else None,
            )
            self.db.add(entry)
            self.db.flush()

            step = "insert ledger_entry_details"
            for line in validated:
                self.db.add(LedgerEntryDetail(
                    entry_id=entry.id,
                    account_id=line.account_id,
                    account_name=accounts[line.account_id].account_name,
                    debit_amount=line.debit,
                    credit_amount=line.credit,
                    narration=line.narration or narration,
                ))
            self.db.flush()

            if status == EntryStatus.POSTED.value:
                step = "update ledger_accounts"
                self._apply_balances(validated, accounts)
                self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Ledger posting for organization {organization_id} failed at {step}: {e}")
            raise PersistenceError(str(e), step) from e

        return entry

    def _load_accounts(self, organization_id: int, account_ids) -> Dict[int, LedgerAccount]:
        """Lock the referenced accounts in id order so concurrent posts queue up"""
        try:
            accounts = self.db.query(LedgerAccount).filter(
                LedgerAccount.id.in_(sorted(account_ids)),
                LedgerAccount.organization_id == organization_id
            ).order_by(LedgerAccount.id).with_for_update().all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(str(e), "select ledger_accounts") from e

        found = {account.id: account for account in accounts}
        missing = sorted(set(account_ids) - set(found))
        if missing:
            raise ValidationError(f"Unknown ledger account(s): {missing}", field="lines")

        inactive = sorted(account.id for account in accounts if not account.is_active)
        if inactive:
            raise ValidationError(f"Inactive ledger account(s): {inactive}", field="lines")
        return found

    def _apply_balances(self, lines: List[PostingLine], accounts: Dict[int, LedgerAccount]):
        for line in lines:
            account = accounts[line.account_id]
            account.current_balance = to_decimal(account.current_balance) + account.signed_amount(line.debit, line.credit)

    def computed_balances(self, organization_id: int) -> Dict[int, Decimal]:
        """Recompute every account balance from posted entry details"""
        rows = self.db.query(
            LedgerEntryDetail.account_id,
            func.sum(LedgerEntryDetail.debit_amount).label("total_debit"),
            func.sum(LedgerEntryDetail.credit_amount).label("total_credit")
        ).join(
            LedgerEntry, LedgerEntryDetail.entry_id == LedgerEntry.id
        ).filter(
            LedgerEntry.organization_id == organization_id,
            LedgerEntry.status == EntryStatus.POSTED.value
        ).group_by(LedgerEntryDetail.account_id).all()
        totals = {row.account_id: (to_decimal(row.total_debit), to_decimal(row.total_credit)) for row in rows}

        balances = {}
        accounts = self.db.query(LedgerAccount).filter(LedgerAccount.organization_id == organization_id).all()
        for account in accounts:
            debit, credit = totals.get(account.id, (ZERO, ZERO))
            balances[account.id] = account.signed_amount(debit, credit)
        return balances

    def verify_balances(self, organization_id: int) -> List[Dict]:
        """List accounts whose cached balance differs from their entry details"""
        computed = self.computed_balances(organization_id)
        drift = []
        accounts = self.db.query(LedgerAccount).filter(
            LedgerAccount.organization_id == organization_id
        ).order_by(LedgerAccount.account_code).all()
        for account in accounts:
            cached = to_decimal(account.current_balance)
            if cached != computed[account.id]:
                drift.append({
                    "account_id": account.id,
                    "account_code": account.account_code,
                    "cached_balance": cached,
                    "computed_balance": computed[account.id],
                })
        if drift:
            logger.warning(f"Balance drift on {len(drift)} account(s) for organization {organization_id}")
        return drift

    def rebuild_balances(self, organization_id: int) -> int:
        """Rewrite cached balances from entry details; returns how many changed"""
        drift = self.verify_balances(organization_id)
        for row in drift:
            account = self.db.query(LedgerAccount).filter(LedgerAccount.id == row["account_id"]).first()
            account.current_balance = row["computed_balance"]
        self.db.flush()
        return len(drift)
