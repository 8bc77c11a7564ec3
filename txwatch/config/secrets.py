"""
Secrets Lookup

The webhook URL is the only credential the relay holds (the URL itself is
the authentication), so it is read the same way as other secrets:

1. Docker secrets (/run/secrets/)
2. Local secrets files (./secrets/)
3. <ENV_VAR>_FILE pointing at a file
4. Environment variable
5. Default value

Priority: Docker secrets > Local secrets > Environment variables
"""

import os
from pathlib import Path
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class SecretsManager:
    """
    Secrets lookup with Docker / local file / environment fallbacks.
    """

    # Docker secrets mount point
    DOCKER_SECRETS_DIR = Path("/run/secrets")

    # Local secrets directory (for development)
    LOCAL_SECRETS_DIR = Path("./secrets")

    def __init__(self, use_docker_secrets: bool = True, use_local_secrets: bool = True):
        """
        Initialize secrets manager.

        Args:
            use_docker_secrets: Enable reading from /run/secrets/ (production)
            use_local_secrets: Enable reading from ./secrets/ (development)
        """
        self.use_docker_secrets = use_docker_secrets
        self.use_local_secrets = use_local_secrets

        logger.debug(f"Secrets manager initialized: docker={use_docker_secrets}, local={use_local_secrets}")

    def get_secret(self,
                   secret_name: str,
                   env_var: Optional[str] = None,
                   default: Optional[str] = None) -> Optional[str]:
        """
        Get secret value from the first source that has it.

        Args:
            secret_name: Name of the secret (e.g., 'webhook_url')
            env_var: Environment variable name (e.g., 'WEBHOOK_URL')
            default: Default value if secret not found

        Returns:
            Secret value as string, or None if not found
        """
        if self.use_docker_secrets:
            value = self._read_file(self.DOCKER_SECRETS_DIR / secret_name, secret_name)
            if value is not None:
                logger.debug(f"Secret '{secret_name}' loaded from Docker secrets")
                return value

        if self.use_local_secrets:
            value = self._read_file(self.LOCAL_SECRETS_DIR / f"{secret_name}.txt", secret_name)
            if value is not None:
                logger.debug(f"Secret '{secret_name}' loaded from local secrets")
                return value

        if env_var:
            env_file_path = os.getenv(f"{env_var}_FILE")
            if env_file_path:
                value = self._read_file(Path(env_file_path), secret_name)
                if value is not None:
                    logger.debug(f"Secret '{secret_name}' loaded from {env_var}_FILE")
                    return value

            value = os.getenv(env_var)
            if value:
                logger.debug(f"Secret '{secret_name}' loaded from environment variable {env_var}")
                return value

        if default is not None:
            logger.debug(f"Secret '{secret_name}' using default value")
            return default

        logger.warning(f"Secret '{secret_name}' not found")
        return None

    @staticmethod
    def _read_file(path: Path, secret_name: str) -> Optional[str]:
        if not path.exists():
            return None
        try:
            return path.read_text().strip()
        except OSError as e:
            logger.warning(f"Failed to read secret '{secret_name}' from {path}: {e}")
            return None


# Global instance (singleton pattern)
_secrets_manager = None


def get_secrets_manager() -> SecretsManager:
    """Get global secrets manager instance (singleton)."""
    global _secrets_manager
    if _secrets_manager is None:
        _secrets_manager = SecretsManager()
    return _secrets_manager


def get_secret(secret_name: str,
               env_var: Optional[str] = None,
               default: Optional[str] = None) -> Optional[str]:
    """
    Convenience function to get a secret using global manager.

    See SecretsManager.get_secret() for full documentation.
    """
    return get_secrets_manager().get_secret(secret_name, env_var, default)


def get_webhook_url(default: Optional[str] = None) -> Optional[str]:
    """Get chat webhook URL."""
    return get_secret('webhook_url', 'WEBHOOK_URL', default=default)
