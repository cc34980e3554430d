"""
Lance le service de checkout sous uvicorn: `python -m travel_checkout`.

Réglages lus dans l'environnement: PORT (8000), UVICORN_RELOAD (1/true/yes
en développement), LOG_LEVEL (info).
"""
import os
import uvicorn


def run() -> None:
    uvicorn.run(
        "travel_checkout.asgi:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 8000)),
        reload=os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes"),
        log_level=os.environ.get("LOG_LEVEL", "info"),
    )

if __name__ == "__main__":
    run()
