from .account import User, Customer, CustomerAddress
from .catalog import Brand, Product, Inventory
from .orders import Cart, CartItem, Order, OrderItem, Payment, PAYMENT_STATUSES, DELIVERY_STATUSES
from .otp import OtpCode

__all__ = [
    'User', 'Customer', 'CustomerAddress',
    'Brand', 'Product', 'Inventory',
    'Cart', 'CartItem', 'Order', 'OrderItem', 'Payment',
    'PAYMENT_STATUSES', 'DELIVERY_STATUSES',
    'OtpCode',
]
