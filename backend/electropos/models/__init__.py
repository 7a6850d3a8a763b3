from .inventory import Product
from .sales import CartItem, PaymentRecord, Sale
from .suppliers import PurchaseOrder, PurchaseOrderLine, PurchaseOrderPayment, Supplier, SupplierTransaction
from .customers import Customer
from .repairs import RepairJob
from .accounting import Expense
from .auth import User

__all__ = [
    'Product',
    'CartItem', 'PaymentRecord', 'Sale',
    'PurchaseOrder', 'PurchaseOrderLine', 'PurchaseOrderPayment', 'Supplier', 'SupplierTransaction',
    'Customer',
    'RepairJob',
    'Expense',
    'User',
]
