"""Runtime configuration read from environment variables (and ``.env`` via the CLI)."""

import os
from dataclasses import dataclass

DEFAULT_PAGE_SIZE = 20


class ConfigError(Exception):
    """Raised at start-up when required credentials are missing or invalid."""


@dataclass(frozen=True)
class Settings:
    """Provider and generation credentials.

    Gmail access needs either a ready bearer token (``gmail_access_token``)
    or the full refresh-token triple; the token wins when both are set.
    """

    anthropic_api_key: str
    gmail_access_token: str | None = None
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_refresh_token: str | None = None
    model: str | None = None
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def can_refresh(self) -> bool:
        return bool(
            self.google_client_id and self.google_client_secret and self.google_refresh_token
        )


def load_settings(env: dict[str, str] | None = None) -> Settings:
    """Build Settings from the environment.

    Raises:
        ConfigError: naming every missing variable, or on a bad page size.
    """
    env = dict(os.environ) if env is None else env

    def _get(name: str) -> str | None:
        value = env.get(name, "").strip()
        return value or None

    settings_kwargs = dict(
        gmail_access_token=_get("GMAIL_ACCESS_TOKEN"),
        google_client_id=_get("GOOGLE_OAUTH_CLIENT_ID"),
        google_client_secret=_get("GOOGLE_OAUTH_CLIENT_SECRET"),
        google_refresh_token=_get("GOOGLE_OAUTH_REFRESH_TOKEN"),
        model=_get("REPLYDESK_MODEL"),
    )

    missing: list[str] = []
    has_refresh = all(
        settings_kwargs[key]
        for key in ("google_client_id", "google_client_secret", "google_refresh_token")
    )
    if not settings_kwargs["gmail_access_token"] and not has_refresh:
        missing.append(
            "GMAIL_ACCESS_TOKEN (or GOOGLE_OAUTH_CLIENT_ID, GOOGLE_OAUTH_CLIENT_SECRET "
            "and GOOGLE_OAUTH_REFRESH_TOKEN)"
        )
    api_key = _get("ANTHROPIC_API_KEY")
    if not api_key:
        missing.append("ANTHROPIC_API_KEY")
    if missing:
        raise ConfigError("Missing configuration: " + "; ".join(missing))

    raw_page_size = _get("REPLYDESK_PAGE_SIZE")
    page_size = DEFAULT_PAGE_SIZE
    if raw_page_size is not None:
        try:
            page_size = int(raw_page_size)
        except ValueError:
            raise ConfigError(f"REPLYDESK_PAGE_SIZE must be an integer, got {raw_page_size!r}") from None
        if page_size < 1:
            raise ConfigError(f"REPLYDESK_PAGE_SIZE must be positive, got {page_size}")

    return Settings(anthropic_api_key=api_key, page_size=page_size, **settings_kwargs)  # type: ignore[arg-type]
