"""
ASGI entrypoint: expose `app` pour les process managers / déploiements
(ex: uvicorn travel_checkout.asgi:app).
"""
from travel_checkout.app_setup.factory import create_app

app = create_app()
