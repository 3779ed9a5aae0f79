from .auth import User
from .inventory import Category, Product, InventoryTransaction, TransactionType
from .activity import ActivityLog
from .settings import UserSettings

__all__ = [
    'User',
    'Category', 'Product', 'InventoryTransaction', 'TransactionType',
    'ActivityLog',
    'UserSettings',
]
