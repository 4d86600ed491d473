"""
Application configuration.
All values come from the environment (a local .env file is loaded first).
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Database configuration from environment
DB_HOST = os.getenv('DB_HOST', 'localhost')
DB_PORT = os.getenv('DB_PORT', '5432')
DB_USER = os.getenv('DB_USER', 'postgres')
DB_PASSWORD = os.getenv('DB_PASSWORD', '')
DB_NAME = os.getenv('DB_NAME', 'mgnrega_db')

# Priority: Use DATABASE_URL if explicitly set, otherwise construct from components
if os.getenv('DATABASE_URL'):
    DATABASE_URL = os.getenv('DATABASE_URL')
else:
    DATABASE_URL = f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"

POOL_SIZE = int(os.getenv('DB_POOL_SIZE', '20'))
MAX_OVERFLOW = int(os.getenv('DB_MAX_OVERFLOW', '40'))
ECHO_SQL = os.getenv('ECHO_SQL', 'false').lower() == 'true'

# HTTP server
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "3000"))
API_RELOAD = os.getenv("API_RELOAD", "false").lower() == "true"
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",")]

# Reverse geocoding (OpenStreetMap Nominatim)
NOMINATIM_URL = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org/reverse")
GEOCODER_USER_AGENT = os.getenv(
    "GEOCODER_USER_AGENT",
    "MGNREGA-Tracker-Project/1.0 (Contact: your-email@example.com)"
)
GEOCODER_TIMEOUT = float(os.getenv("GEOCODER_TIMEOUT", "5"))

# Only one state is seeded and matched against
SUPPORTED_STATE_CODE = os.getenv("SUPPORTED_STATE_CODE", "MH")
SUPPORTED_STATE_NAME = os.getenv("SUPPORTED_STATE_NAME", "महाराष्ट्र (Maharashtra)")

# Synthetic data generation
SEED_ON_STARTUP = os.getenv("SEED_ON_STARTUP", "true").lower() == "true"
SEED_WORKERS = int(os.getenv("SEED_WORKERS", "8"))

# Scheduler
ENABLE_AUTO_SYNC = os.getenv("ENABLE_AUTO_SYNC", "true").lower() == "true"
SYNC_SCHEDULE = os.getenv("SYNC_SCHEDULE", "0 2 * * *")
SCHEDULER_TIMEZONE = os.getenv("SCHEDULER_TIMEZONE", "Asia/Kolkata")
SCHEDULER_LOCK_FILE = os.getenv("SCHEDULER_LOCK_FILE", "/tmp/mgnrega_scheduler.lock")
