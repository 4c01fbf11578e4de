import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigurationError

# Load .env from project root (directory containing guru_mcp/), so env is found regardless of cwd.
# MCP clients usually start the server from their own working directory.
_project_root = Path(__file__).resolve().parent.parent
_env_file = _project_root / ".env"
load_dotenv(_env_file)
if not _env_file.exists():
    # Fallback: try cwd (e.g. when run as "python -m guru_mcp.server_stdio" from repo root)
    load_dotenv()

DEFAULT_GURU_API_BASE_URL = "https://api.getguru.com/api/v1"


@dataclass(frozen=True)
class Config:
    """Application configuration"""

    # Guru credentials (Basic auth: user e-mail + API token)
    guru_email: str = os.getenv("GURU_EMAIL", "")
    guru_api_token: str = os.getenv("GURU_API_TOKEN", "")
    guru_api_base_url: str = os.getenv("GURU_API_BASE_URL", DEFAULT_GURU_API_BASE_URL)

    # Server Configuration
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "30"))

    def validate(self) -> list[str]:
        """
        Validate configuration

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.guru_email:
            errors.append("GURU_EMAIL is not configured")

        if not self.guru_api_token:
            errors.append("GURU_API_TOKEN is not configured")

        if not self.guru_api_base_url:
            errors.append("GURU_API_BASE_URL is not configured")

        if self.request_timeout <= 0:
            errors.append("REQUEST_TIMEOUT must be a positive number of seconds")

        return errors

    def require_valid(self) -> None:
        """Raise ConfigurationError if any required setting is missing."""
        errors = self.validate()
        if errors:
            raise ConfigurationError(errors)


# Global config instance
config = Config()
