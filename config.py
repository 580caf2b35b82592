"""
PocketBase connection configuration
Environment-aware configuration based on APP_ENV
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Environment modes
EnvironmentMode = Literal["development", "test", "production"]

# Collection used for superuser (admin) authentication
SUPERUSERS_COLLECTION = "_superusers"


def load_app_environment(mode: Optional[str] = None) -> str:
    """
    Load environment variables from the appropriate .env file.

    Priority:
    1. Explicit 'mode' argument
    2. APP_ENV environment variable
    3. Default to 'development'

    Loads .env.{mode} if it exists, falling back to .env
    """
    if not mode:
        mode = os.getenv('APP_ENV', 'development')

    base_path = Path(__file__).parent
    env_file = base_path / f'.env.{mode}'
    fallback_file = base_path / '.env'

    # override=False lets variables set by the host process win over file values
    if env_file.exists():
        logger.info(f"Loading config from {env_file}")
        load_dotenv(env_file, override=False)
    elif fallback_file.exists():
        logger.info(f"Loading config from {fallback_file}")
        load_dotenv(fallback_file, override=False)
    else:
        logger.debug(f"No config file found for mode '{mode}'")

    return mode


@dataclass
class PocketBaseConfig:
    """PocketBase server configuration"""

    url: str

    # Optional superuser credentials, used when an admin operation
    # is requested without explicit credentials
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None

    # HTTP client settings
    timeout: float = 30.0  # seconds

    @property
    def base_url(self) -> str:
        """Server URL without a trailing slash"""
        return self.url.rstrip('/')

    @property
    def has_admin_credentials(self) -> bool:
        return bool(self.admin_email and self.admin_password)

    @classmethod
    def from_environment(cls, mode: Optional[EnvironmentMode] = None) -> 'PocketBaseConfig':
        """
        Load configuration from environment variables

        Environment variables:
        - APP_ENV: Environment mode (development, test, production)
        - POCKETBASE_URL: PocketBase server URL (required)
        - POCKETBASE_ADMIN_EMAIL: Superuser email (optional)
        - POCKETBASE_ADMIN_PASSWORD: Superuser password (optional)
        - POCKETBASE_TIMEOUT: HTTP timeout in seconds (default: 30)

        Raises:
            ValueError: If POCKETBASE_URL is not set
        """
        load_app_environment(mode)

        url = os.getenv('POCKETBASE_URL')
        if not url:
            raise ValueError("POCKETBASE_URL environment variable is required")

        return cls(
            url=url,
            admin_email=os.getenv('POCKETBASE_ADMIN_EMAIL') or None,
            admin_password=os.getenv('POCKETBASE_ADMIN_PASSWORD') or None,
            timeout=float(os.getenv('POCKETBASE_TIMEOUT', '30')),
        )


# Utility functions
def get_environment_mode() -> EnvironmentMode:
    """Get current environment mode from APP_ENV variable"""
    mode = os.getenv('APP_ENV', 'development').lower()
    if mode not in ('development', 'test', 'production'):
        mode = 'development'
    return mode  # type: ignore


# Example .env file content
ENV_TEMPLATE = """
# Application Environment
# Options: development, test, production
APP_ENV=development

# PocketBase server
POCKETBASE_URL=http://127.0.0.1:8090

# Superuser credentials (optional)
# Used by authenticate_user when isAdmin=true and no email/password is given
POCKETBASE_ADMIN_EMAIL=admin@example.com
POCKETBASE_ADMIN_PASSWORD=your_password_here

# HTTP timeout in seconds
POCKETBASE_TIMEOUT=30
"""


def create_env_file(filepath: str = ".env"):
    """Create a template .env file"""
    with open(filepath, 'w') as f:
        f.write(ENV_TEMPLATE)
    print(f"Created template .env file at {filepath}")


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "init":
        create_env_file(sys.argv[2] if len(sys.argv) > 2 else ".env")
        sys.exit(0)

    print(f"Environment mode: {get_environment_mode()}")
    try:
        config = PocketBaseConfig.from_environment()
        print(f"✅ Loaded from environment: {config.base_url}")
        print(f"   Admin credentials: {'set' if config.has_admin_credentials else 'not set'}")
    except Exception as e:
        print(f"⚠️  Could not load from environment: {e}")
