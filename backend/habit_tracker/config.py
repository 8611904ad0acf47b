import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

APP_TITLE = "Habit Tracker API"
API_PREFIX = "/api/v1"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Comma separated, "*" allows every origin
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

LEADERBOARD_PAGE_SIZE = int(os.getenv("LEADERBOARD_PAGE_SIZE", "10"))
