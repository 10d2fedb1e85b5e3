from pathlib import Path

# Constants
PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ACCESS_POLICY_PATH = str(PROJECT_ROOT / "config" / "access_policies.json")

STORAGE_BASE_URL = "memory://goal-tracker"
GOALS_PREFIX = "goals"
USERS_PREFIX = "users"
SEQUENCES_PREFIX = "sequences"

# Credential categories used by access policies
CREDENTIAL_LOGIN = "login"
CREDENTIAL_ADMIN = "admin"
CREDENTIAL_CATEGORIES = (CREDENTIAL_LOGIN, CREDENTIAL_ADMIN)

ROLE_MEMBER = "member"
ROLE_ADMIN = "admin"

CACHE_NAMESPACE = "goal-tracker-commands"
DEFAULT_CACHE_EXPIRE_SECONDS: int = 60

# Goal field limits
GOAL_TITLE_MIN_LENGTH = 3
GOAL_TITLE_MAX_LENGTH = 100
GOAL_DESCRIPTION_MAX_LENGTH = 1000
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
USERNAME_PATTERN = r"^[a-z0-9_]+$"

ALLOWED_IMAGE_CONTENT_TYPES = ("image/png", "image/jpeg", "image/gif")
ALLOWED_URL_SCHEMES = ("http", "https")

DEFAULT_CORS_ALLOW_ORIGINS = "http://localhost:3000,http://127.0.0.1:5500"
