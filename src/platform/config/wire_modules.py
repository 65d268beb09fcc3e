"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.ticketing.app.command import (
    apply_coupon_use_case,
    cancel_tickets_use_case,
    checkout_cart_use_case,
    create_coupon_use_case,
    create_event_use_case,
    delete_admin_use_case,
    delete_client_use_case,
    delete_coupon_use_case,
    delete_event_use_case,
    expire_pending_carts_use_case,
    login_admin_use_case,
    login_client_use_case,
    register_client_use_case,
    remove_coupon_use_case,
    request_admin_recovery_use_case,
    reserve_tickets_use_case,
    reset_admin_password_use_case,
    reset_cart_use_case,
    settle_payment_use_case,
    update_admin_use_case,
    update_client_use_case,
    update_coupon_use_case,
    update_event_use_case,
    verify_client_use_case,
)
from src.service.ticketing.app.query import (
    get_cart_use_case,
    get_client_use_case,
    get_event_use_case,
    list_coupons_use_case,
    list_purchases_use_case,
    search_events_use_case,
)
from src.service.ticketing.driving_adapter.http_controller import (
    auth_controller,
    payment_controller,
)
from src.service.ticketing.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    # Ordering engine
    reserve_tickets_use_case,
    cancel_tickets_use_case,
    apply_coupon_use_case,
    remove_coupon_use_case,
    checkout_cart_use_case,
    settle_payment_use_case,
    expire_pending_carts_use_case,
    reset_cart_use_case,
    # Inventory and coupons
    create_event_use_case,
    update_event_use_case,
    delete_event_use_case,
    get_event_use_case,
    search_events_use_case,
    create_coupon_use_case,
    update_coupon_use_case,
    delete_coupon_use_case,
    list_coupons_use_case,
    # Accounts
    register_client_use_case,
    verify_client_use_case,
    login_client_use_case,
    login_admin_use_case,
    update_client_use_case,
    delete_client_use_case,
    request_admin_recovery_use_case,
    reset_admin_password_use_case,
    update_admin_use_case,
    delete_admin_use_case,
    get_client_use_case,
    get_cart_use_case,
    list_purchases_use_case,
    # Controllers that inject providers directly
    auth_controller,
    payment_controller,
    role_auth,
]
