"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.ticketing.driven_adapter.model.admin_model import AdminModel
from src.service.ticketing.driven_adapter.model.cart_model import CartModel
from src.service.ticketing.driven_adapter.model.client_model import ClientModel
from src.service.ticketing.driven_adapter.model.coupon_model import CouponModel
from src.service.ticketing.driven_adapter.model.event_model import EventModel, LocalityModel
from src.service.ticketing.driven_adapter.model.payment_attempt_model import PaymentAttemptModel
from src.service.ticketing.driven_adapter.model.purchase_model import PurchaseModel

__all__ = [
    'AdminModel',
    'CartModel',
    'ClientModel',
    'CouponModel',
    'EventModel',
    'LocalityModel',
    'PaymentAttemptModel',
    'PurchaseModel',
]
