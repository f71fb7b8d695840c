"""
Gestionnaires d'exceptions.
- HTTPException: corps JSON {"detail": ...}
- CheckoutError remontée jusqu'à l'API: 400 avec le message destiné à l'utilisateur
- Exception inattendue: journalisée, 500 générique
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from storefront.checkout.errors import CheckoutError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError):
        logger.warning("checkout error path=%s type=%s", request.url.path, type(exc).__name__)
        return JSONResponse(status_code=400, content={"detail": exc.user_message})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled error path=%s", request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
