# storefront.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale de la boutique.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Razorpay), CORS/hosts
- Paramètres du tunnel de commande: devise, frais de port, clé de stockage du panier
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    raw = _clean_env(os.getenv(name) or "")
    try:
        return int(raw) if raw else default
    except ValueError:
        return default

# Supabase: URL et clés (anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Razorpay: clé publique (widget) et secret (serveur uniquement)
RAZORPAY_KEY_ID = _clean_env(os.getenv("RAZORPAY_KEY_ID") or os.getenv("VITE_RAZORPAY_KEY_ID") or "")
RAZORPAY_KEY_SECRET = _clean_env(os.getenv("RAZORPAY_KEY_SECRET") or "")

# Backend de confiance appelé par l'adaptateur de paiement (création d'ordre, vérification)
CHECKOUT_API_BASE_URL = _clean_env(os.getenv("CHECKOUT_API_BASE_URL") or "http://localhost:8000").rstrip("/")
CHECKOUT_HTTP_TIMEOUT = float(_clean_env(os.getenv("CHECKOUT_HTTP_TIMEOUT") or "") or 15)

# Tunnel de commande (montants en paise)
CHECKOUT_CURRENCY = _clean_env(os.getenv("CHECKOUT_CURRENCY") or "INR")
SHIPPING_FEE = _int_env("SHIPPING_FEE", 0)
ORDER_NUMBER_PREFIX = _clean_env(os.getenv("ORDER_NUMBER_PREFIX") or "RSH")
STORE_NAME = os.getenv("STORE_NAME", "Storefront")
SUPPORT_CONTACT = os.getenv("SUPPORT_CONTACT", "support@example.com")

# Panier persistant (équivalent localStorage)
CART_STORAGE_KEY = _clean_env(os.getenv("CART_STORAGE_KEY") or "cart")
CART_REDIS_URL = _clean_env(os.getenv("CART_REDIS_URL") or "")

# Rôles: emails administrateurs (back-office commandes)
ADMIN_EMAILS = [e.strip().lower() for e in os.getenv("ADMIN_EMAILS", "admin@example.com").split(",") if e.strip()]

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]
