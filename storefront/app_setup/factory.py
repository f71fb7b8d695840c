"""
Factory d'application utilisée par les entrypoints (storefront.asgi) et les tests.
"""
from fastapi import FastAPI

from .exceptions import register_exception_handlers
from .lifespan import lifespan
from .middlewares import register_basic_middlewares
from .routers import register_routers


def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares (CORS, TrustedHost)
      - gestionnaires d'exceptions
      - routers (paiements, commandes, profil, admin, health)
    """
    app = FastAPI(title="Storefront Checkout", lifespan=lifespan)
    register_basic_middlewares(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
