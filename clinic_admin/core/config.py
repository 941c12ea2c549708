"""
Basic configuration

- Remote clinic API location and request timeout for the admin client
- Upload size limit shared by the client and the dev server
- Dev server storage directory and CORS origins
- Supports environment variables (a .env file at the project root is loaded first)
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Get the project root directory (parent of clinic_admin/)
project_root = Path(__file__).parent.parent.parent
load_dotenv(dotenv_path=project_root / '.env')

# Remote API used by HttpRemoteStore
API_BASE_URL = os.getenv("CLINIC_API_URL", "http://localhost:5000")
API_TIMEOUT_SECONDS = float(os.getenv("CLINIC_API_TIMEOUT", "10"))

# Matches the "JPG, PNG, PDF hasta 10MB" limit shown by the upload widgets
MAX_UPLOAD_MB = int(os.getenv("CLINIC_MAX_UPLOAD_MB", "10"))
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

# JSON storage directory for the dev server
DATA_DIR = os.getenv("CLINIC_DATA_DIR", "data")

# Default localhost origins for development
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]

# Get additional CORS origins from environment variable
ADDITIONAL_CORS_ORIGINS = os.getenv("CORS_ORIGINS", "").split(",") if os.getenv("CORS_ORIGINS") else []

# Filter out empty strings from split
ADDITIONAL_CORS_ORIGINS = [origin.strip() for origin in ADDITIONAL_CORS_ORIGINS if origin.strip()]

# Combine default and additional origins
CORS_ORIGINS = DEFAULT_CORS_ORIGINS + ADDITIONAL_CORS_ORIGINS
