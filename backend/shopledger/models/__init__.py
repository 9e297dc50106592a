from .tenancy import Business, Store, StoreCounter
from .customers import Customer
from .staff import Staff, STAFF_ROLES
from .inventory import InventoryItem, INVENTORY_TYPES
from .sales import Order, Checkout, Transaction, PAYMENT_METHODS, PAYMENT_STATUSES
from .profit_loss import ProfitLoss

__all__ = [
    'Business', 'Store', 'StoreCounter',
    'Customer',
    'Staff', 'STAFF_ROLES',
    'InventoryItem', 'INVENTORY_TYPES',
    'Order', 'Checkout', 'Transaction', 'PAYMENT_METHODS', 'PAYMENT_STATUSES',
    'ProfitLoss',
]
