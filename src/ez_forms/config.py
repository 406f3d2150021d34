"""Configuration loader for EZ Forms with environment-specific support"""

import os
from pathlib import Path

from dotenv import load_dotenv

project_dir = Path(__file__).parent.parent.parent
env_path = project_dir / ".env"

# Load .env file if it exists. For local development only.
if env_path.exists():
    load_dotenv(env_path)

# Configuration dictionary - set once at initialization
config = {
    "database_url": os.getenv("DATABASE_URL"),
    "port": int(os.getenv("PORT", "8080")),
    "log_level": os.getenv("LOG_LEVEL", "INFO"),
    # Host of the identity provider that issues Bearer tokens (e.g. "acme.us.auth0.com")
    "auth_domain": os.getenv("AUTH_DOMAIN"),
    "auth_audience": os.getenv("AUTH_AUDIENCE"),
    # Claim carrying the requester's email address in access tokens
    "auth_email_claim": os.getenv("AUTH_EMAIL_CLAIM", "email"),
    "slug_max_attempts": int(os.getenv("SLUG_MAX_ATTEMPTS", "5")),
    "environment": os.getenv("ENVIRONMENT", "development"),
}
