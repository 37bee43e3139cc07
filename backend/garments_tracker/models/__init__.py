from .accounts import Account
from .catalog import Product
from .orders import Order, OrderTrackingUpdate
from .payments import Payment

__all__ = [
    'Account',
    'Product',
    'Order', 'OrderTrackingUpdate',
    'Payment',
]
