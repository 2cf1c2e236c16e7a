"""Runtime settings for the transport and the bundled sources.

Values come from ``ANIMELINK_*`` environment variables or a ``.env`` file in
the working directory:

- ANIMELINK_REQUEST_TIMEOUT (seconds, default 10)
- ANIMELINK_USER_AGENT
- ANIMELINK_ARRAYANIME_ENDPOINT (site root used to build canonical links)
- ANIMELINK_ARRAYANIME_API_ENDPOINT (JSON API root)
- ANIMELINK_EPISODE_ORDER ("natural" or "reversed")
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Settings for the HTTP transport and source endpoints."""

    request_timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    follow_redirects: bool = True

    arrayanime_endpoint: str = "https://arrayanime.com"
    arrayanime_api_endpoint: str = "https://arrayanime.vercel.app/api"

    episode_order: Literal["natural", "reversed"] = "natural"

    model_config = SettingsConfigDict(
        env_prefix="ANIMELINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
