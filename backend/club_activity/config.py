import os

from dotenv import load_dotenv

# Load .env at repo root
load_dotenv(dotenv_path=os.path.join(os.path.dirname(os.path.dirname(__file__)), "..", ".env"))

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./club_activity.db")
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Client side; API_URL overrides the default at call time
DEFAULT_API_URL = "http://localhost:8000"
SESSION_STORAGE_PATH = os.getenv(
    "SESSION_STORAGE_PATH", os.path.join(os.path.expanduser("~"), ".club_activity", "session.json")
)
