# travel_checkout.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Charger le .env à la racine du projet de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du service de checkout.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise les URLs du backend (hôte principal + hôte de repli)
- Expose les constantes métier (remise partenaire, limites du prestataire de paiement)
- Expose les paramètres de polling de confirmation, de session et de CORS
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _clean_url(v: str) -> str:
    url = _clean_env(v)
    if url and not url.startswith("http"):
        url = "https://" + url
    return url.rstrip("/")

def _float_env(name: str, default: float) -> float:
    try:
        return float(_clean_env(os.getenv(name)) or default)
    except ValueError:
        return default

def _int_env(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name)) or default)
    except ValueError:
        return default

# Backend REST (réservations, coupons, paiements, utilisateurs)
# - FALLBACK_API_BASE_URL: second hôte utilisé uniquement par le polling de confirmation
#   (vide => pas de repli)
API_BASE_URL = _clean_url(os.getenv("API_BASE_URL") or "http://localhost:5002/api")
FALLBACK_API_BASE_URL = _clean_url(os.getenv("FALLBACK_API_BASE_URL") or "")
HTTP_TIMEOUT_SECONDS = _float_env("HTTP_TIMEOUT_SECONDS", 30.0)

# Tarification
PARTNER_ROLE = _clean_env(os.getenv("PARTNER_ROLE") or "agency").lower()
PARTNER_DISCOUNT_RATE = _float_env("PARTNER_DISCOUNT_RATE", 0.97)

# Prestataire de paiement: la description est limitée à 25 caractères
PAYMENT_DESCRIPTION_MAX_LENGTH = 25
PAYMENT_DESCRIPTION = _clean_env(os.getenv("PAYMENT_DESCRIPTION") or "Goi dich vu")[:PAYMENT_DESCRIPTION_MAX_LENGTH]

# Polling de confirmation (par hôte)
CONFIRMATION_MAX_ATTEMPTS = _int_env("CONFIRMATION_MAX_ATTEMPTS", 3)
CONFIRMATION_RETRY_DELAY_SECONDS = _float_env("CONFIRMATION_RETRY_DELAY_SECONDS", 2.0)
CONFIRMATION_NETWORK_FALLBACK_DELAY_SECONDS = _float_env("CONFIRMATION_NETWORK_FALLBACK_DELAY_SECONDS", 1.0)

# Garde "déjà traité" (cumul fidélité): Redis si configuré, sinon session signée
PROCESSED_STORE_REDIS_URL = _clean_env(os.getenv("PROCESSED_STORE_REDIS_URL") or "")

# Session / cookies
COOKIE_NAME = _clean_env(os.getenv("COOKIE_NAME") or "access_token")
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
SESSION_SECRET_KEY = _clean_env(os.getenv("SESSION_SECRET_KEY") or "replace_me_with_a_long_random_secret")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

# Front: pages de connexion et de retour de paiement
FRONTEND_BASE_URL = _clean_url(os.getenv("FRONTEND_BASE_URL") or "http://localhost:5173")
LOGIN_PATH = os.getenv("LOGIN_PATH", "/login")
