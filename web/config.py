"""Centralized configuration for the storefront web app."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env at the project root
load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env")

# Flask app settings
# Render sets PORT dynamically; fall back to FLASK_PORT or 5000 for local.
FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
FLASK_PORT = int(os.getenv("FLASK_PORT", os.getenv("PORT", "5000")))
FLASK_DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"
SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-only-change-me")

# The only account allowed into the editor
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com").strip().lower()

# Uploaded product images
MAX_IMAGE_SIZE = int(os.getenv("MAX_IMAGE_SIZE", str(5 * 1024 * 1024)))
MAX_IMAGE_DIMENSION = int(os.getenv("MAX_IMAGE_DIMENSION", "1200"))

# Whether create_app() loads the store immediately (tests turn this off)
LOAD_ON_START = os.getenv("LOAD_ON_START", "True").lower() == "true"
