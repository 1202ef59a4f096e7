import logging
import os
from dataclasses import dataclass

from requests.auth import HTTPBasicAuth

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass
class WordPressConfig:
    """Connection settings for the WordPress site whose media library is queried.

    Credentials are optional. They are only sent when both the username and the
    application password are set.
    """

    site_url: str = ""
    username: str = ""
    app_password: str = ""
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        self.site_url = (self.site_url or "").strip().rstrip("/")
        self.username = (self.username or "").strip()
        self.app_password = (self.app_password or "").strip()

    @classmethod
    def from_env(cls, password_file="wp.api"):
        """Load settings from WORDPRESS_* env vars, falling back to a local wp.api file for the password."""
        app_password = os.getenv("WORDPRESS_APP_PASSWORD", "").strip()
        if not app_password and password_file:
            app_password = _read_password_file(password_file)
        timeout = os.getenv("WORDPRESS_TIMEOUT", "").strip()
        try:
            timeout = float(timeout) if timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ConfigError(f"WORDPRESS_TIMEOUT must be a number, got {timeout!r}")
        return cls(
            site_url=os.getenv("WORDPRESS_SITE_URL", ""),
            username=os.getenv("WORDPRESS_USERNAME", ""),
            app_password=app_password,
            timeout=timeout,
        )

    def override(self, site_url=None, username=None, app_password=None, timeout=None):
        """Return a copy with any non-None values replaced (used for CLI flags)."""
        return WordPressConfig(
            site_url=self.site_url if site_url is None else site_url,
            username=self.username if username is None else username,
            app_password=self.app_password if app_password is None else app_password,
            timeout=self.timeout if timeout is None else timeout,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.app_password)

    def auth(self):
        """Basic auth for requests, or None to send requests unauthenticated."""
        if not self.has_credentials:
            return None
        return HTTPBasicAuth(self.username, self.app_password)

    def require_site_url(self):
        if not self.site_url:
            raise ConfigError(
                "No WordPress site URL configured. Set WORDPRESS_SITE_URL or pass --site-url."
            )
        if not self.site_url.startswith(("http://", "https://")):
            raise ConfigError(
                f"WordPress site URL must start with http:// or https://, got {self.site_url!r}"
            )


def _read_password_file(path):
    if not os.path.exists(path):
        return ""
    try:
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            return f.read().strip()
    except OSError as e:
        logger.warning(f"Could not read application password from {path}: {e}")
        return ""
