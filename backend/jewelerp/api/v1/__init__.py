# API v1 Package
from jewelerp.api.v1 import organizations, accounting, crm, inventory, sales, purchases, vouchers, settings

__all__ = [
    'organizations',
    'accounting',
    'crm',
    'inventory',
    'sales',
    'purchases',
    'vouchers',
    'settings',
]
