"""
Registre central des routers (API v1 checkout/paiements, health).
"""
from fastapi import FastAPI
from travel_checkout.checkout import views as checkout_views
from travel_checkout.payments import views as payments_views
from travel_checkout.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(checkout_views.router)
    app.include_router(payments_views.router)
    app.include_router(health_router)
