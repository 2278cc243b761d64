# Services Package
from jewelerp.services.organization_service import OrganizationService, SystemAccount
from jewelerp.services.ledger_service import LedgerAccountService, LedgerService, validate_lines
from jewelerp.services.report_service import ReportService
from jewelerp.services.reset_service import ResetService
from jewelerp.services.crm_service import CustomerService, SupplierService
from jewelerp.services.inventory_service import CategoryService, ItemService
from jewelerp.services.sales_service import SaleService
from jewelerp.services.purchase_service import PurchaseService
from jewelerp.services.voucher_service import VoucherService, AdvancePaymentService

__all__ = [
    'OrganizationService',
    'SystemAccount',
    'LedgerAccountService',
    'LedgerService',
    'validate_lines',
    'ReportService',
    'ResetService',
    'CustomerService',
    'SupplierService',
    'CategoryService',
    'ItemService',
    'SaleService',
    'PurchaseService',
    'VoucherService',
    'AdvancePaymentService',
]
