import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# --- DATABASE ---
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./attendance.db")

# --- AUTH ---
SECRET_KEY = os.environ.get("SECRET_KEY") or "change_this_secret_before_deploying"
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24 hours

# --- WEB ---
CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]
TEMPLATES_DIR = os.path.join(BASE_DIR, "templates")
STATIC_DIR = os.path.join(BASE_DIR, "static")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def messaging_credentials():
    """WhatsApp provider secrets, read on every call so they can be rotated live."""
    return {
        "green_api_instance": os.environ.get("GREEN_API_INSTANCE"),
        "green_api_token": os.environ.get("GREEN_API_TOKEN"),
        "ultramsg_instance": os.environ.get("ULTRAMSG_INSTANCE"),
        "ultramsg_token": os.environ.get("ULTRAMSG_TOKEN"),
    }
