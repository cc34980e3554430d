"""
Factory d'application pour les entrypoints (ex: travel_checkout.asgi).
"""
import logging
import os

from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares
from .exceptions import register_exception_handlers
from .routers import register_routers

def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "info").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares de base (session, CORS, hôtes de confiance)
      - gestionnaire d'exceptions (401/403 -> connexion)
      - routers checkout, paiements, health
    """
    configure_logging()
    app = FastAPI(title="Travel Checkout API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
