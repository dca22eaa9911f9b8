import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

# Set up logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger('config')


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Configuration settings for the plant catalog"""

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    DEBUG = ENVIRONMENT == "development"

    # MongoDB
    DATABASE_URL = os.getenv("DATABASE_URL")
    DATABASE_NAME = os.getenv("DATABASE_NAME")

    # HTTP server
    PORT = int(os.getenv("PORT", "8000"))
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Insert demo plants on startup when the collection is empty
    SEED_DEMO_DATA = _env_flag("SEED_DEMO_DATA")

    # Storefront client
    STOREFRONT_API_URL = os.getenv("STOREFRONT_API_URL", "http://localhost:8000/api")
    REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))

    @classmethod
    def validate(cls):
        """Validate that critical configuration is present"""
        missing = []

        if not cls.DATABASE_URL:
            missing.append("DATABASE_URL")
        if not cls.DATABASE_NAME:
            missing.append("DATABASE_NAME")

        return len(missing) == 0, missing


# Create a global config instance
config = Config()

# Validate configuration on import
is_valid, missing_config = config.validate()
if not is_valid:
    logger.warning(f"Configuration is missing these critical items: {missing_config}")
