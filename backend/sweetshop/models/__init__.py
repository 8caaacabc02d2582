from .inventory import InventoryItem, derive_stock_status
from .orders import RegularOrder, RegularOrderLine, EventOrder, EventOrderLine, EventOrderPayment
from .vendors import Vendor, VendorTransaction
from .expenses import Expense
from .staff import Staff, AttendanceEntry
from .auth import User, SessionToken

__all__ = [
    'InventoryItem', 'derive_stock_status',
    'RegularOrder', 'RegularOrderLine',
    'EventOrder', 'EventOrderLine', 'EventOrderPayment',
    'Vendor', 'VendorTransaction',
    'Expense',
    'Staff', 'AttendanceEntry',
    'User', 'SessionToken',
]
