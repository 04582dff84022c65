"""
Application configuration module.

Loads environment variables (from a .env file or the system environment)
and exposes them as simple Python constants used by the rest of the
backend: database connection details, the HTTP bind address, where wine
photos are stored and how they are addressed publicly.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

# --- Database connection settings ---
# Each variable falls back to a sensible default for local development.
DB_HOST = os.getenv("DB_HOST", "127.0.0.1")
DB_PORT = int(os.getenv("DB_PORT", "5432"))
DB_NAME = os.getenv("DB_NAME", "cellar")
DB_USER = os.getenv("DB_USER", "cellar")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_POOL_MIN = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX = int(os.getenv("DB_POOL_MAX", "5"))

# --- HTTP server ---
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# Comma-separated list; "*" allows any origin (the browser app and edge clients).
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# --- Photo storage ---
PHOTO_DIR = os.getenv("PHOTO_DIR", "./data/photos")
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", f"http://localhost:{API_PORT}").rstrip("/")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
