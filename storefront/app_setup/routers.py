"""
Registre central des routers.
- API paiements: /api/create-razorpay-order, /api/verify-razorpay-signature
- API v1: commandes, profil
- Admin: commandes (back-office)
- Health
"""
from fastapi import FastAPI

from storefront.health.router import router as health_router
from storefront.orders import views as orders_views
from storefront.payments import views as payments_views
from storefront.profiles import views as profiles_views


def register_routers(app: FastAPI) -> None:
    # API paiements (appelée par l'adaptateur de passerelle)
    app.include_router(payments_views.router)
    # API v1
    app.include_router(orders_views.router)
    app.include_router(profiles_views.router)
    # Admin
    app.include_router(orders_views.admin_router)
    # Health & monitoring
    app.include_router(health_router)
