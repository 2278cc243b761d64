"""
Organization Service - Organizations and their default chart of accounts
"""
import logging
from typing import Optional, List
from sqlalchemy.orm import Session
from jewelerp.models import Organization, LedgerAccount
from jewelerp.schemas import OrganizationCreate

logger = logging.getLogger(__name__)


class SystemAccount:
    """Account codes the document services post to"""
    CASH = "1000"
    BANK = "1100"
    SUNDRY_DEBTORS = "1200"
    STOCK = "1300"
    SUPPLIER_ADVANCES = "1400"
    STAFF_ADVANCES = "1410"
    GST_INPUT = "1500"
    SUNDRY_CREDITORS = "2000"
    GST_OUTPUT = "2100"
    CUSTOMER_ADVANCES = "2200"
    CAPITAL = "3000"
    OPENING_BALANCE_EQUITY = "3100"
    SALES = "4000"
    OTHER_INCOME = "4100"
    PURCHASES = "5000"
    INDIRECT_EXPENSES = "5100"


# (code, name, type, group)
DEFAULT_ACCOUNTS = [
    # Assets
    (SystemAccount.CASH, "Cash-in-hand", "asset", "Cash-in-hand"),
    (SystemAccount.BANK, "Bank Account", "asset", "Bank Accounts"),
    (SystemAccount.SUNDRY_DEBTORS, "Sundry Debtors", "asset", "Current Assets"),
    (SystemAccount.STOCK, "Stock-in-hand", "asset", "Current Assets"),
    (SystemAccount.SUPPLIER_ADVANCES, "Supplier Advances", "asset", "Current Assets"),
    (SystemAccount.STAFF_ADVANCES, "Staff Advances", "asset", "Current Assets"),
    (SystemAccount.GST_INPUT, "GST Input Credit", "asset", "Current Assets"),
    # Liabilities
    (SystemAccount.SUNDRY_CREDITORS, "Sundry Creditors", "liability", "Current Liabilities"),
    (SystemAccount.GST_OUTPUT, "GST Output Payable", "liability", "Duties & Taxes"),
    (SystemAccount.CUSTOMER_ADVANCES, "Customer Advances", "liability", "Current Liabilities"),
    # Equity
    (SystemAccount.CAPITAL, "Capital Account", "equity", "Capital Account"),
    (SystemAccount.OPENING_BALANCE_EQUITY, "Opening Balance Equity", "equity", "Reserves & Surplus"),
    # Income
    (SystemAccount.SALES, "Sales", "income", "Sales"),
    (SystemAccount.OTHER_INCOME, "Other Income", "income", "Indirect Income"),
    # Expenses
    (SystemAccount.PURCHASES, "Purchases", "expense", "Purchases"),
    (SystemAccount.INDIRECT_EXPENSES, "Indirect Expenses", "expense", "Indirect Expenses"),
]


class OrganizationService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, organization_id: int) -> Optional[Organization]:
        return self.db.query(Organization).filter(Organization.id == organization_id).first()

    def get_all(self) -> List[Organization]:
        return self.db.query(Organization).order_by(Organization.id).all()

    def create(self, organization_data: OrganizationCreate) -> Organization:
        """Create an organization with its default chart of accounts"""
        organization = Organization(**organization_data.model_dump())
        self.db.add(organization)
        self.db.flush()

        self.create_default_chart_of_accounts(organization.id)
        logger.info(f"Created organization {organization.id} ({organization.name})")
        return organization

    def create_default_chart_of_accounts(self, organization_id: int) -> List[LedgerAccount]:
        """Create the system accounts that are missing for an organization"""
        existing = {
            code for (code,) in self.db.query(LedgerAccount.account_code).filter(
                LedgerAccount.organization_id == organization_id
            ).all()
        }

        created = []
        for code, name, account_type, group in DEFAULT_ACCOUNTS:
            if code in existing:
                continue
            account = LedgerAccount(
                organization_id=organization_id,
                account_code=code,
                account_name=name,
                account_type=account_type,
                account_group=group,
                is_system_account=True,
                is_active=True,
            )
            self.db.add(account)
            created.append(account)

        self.db.flush()
        return created
