"""
Module 'payments': passerelle Razorpay.
- côté serveur: razorpay_client, service, views (/api/create-razorpay-order, /api/verify-razorpay-signature)
- côté tunnel: api_client (httpx), widget, host, gateway
"""

from .api_client import CheckoutApiClient
from .gateway import PaymentGateway, VerifiedPayment
from .host import GatewayHostEnvironment, HostSurface, SurfaceFlag
from .widget import (
    PaymentWidget,
    RazorpayCheckoutWidget,
    WidgetDismissed,
    WidgetFailed,
    WidgetOptions,
    WidgetSuccess,
)

__all__ = [
    "CheckoutApiClient",
    "PaymentGateway",
    "VerifiedPayment",
    "GatewayHostEnvironment",
    "HostSurface",
    "SurfaceFlag",
    "PaymentWidget",
    "RazorpayCheckoutWidget",
    "WidgetDismissed",
    "WidgetFailed",
    "WidgetOptions",
    "WidgetSuccess",
]
