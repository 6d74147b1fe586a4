"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK (Junior Developer Guide) ───────────────────────
#
# This class reads configuration from TWO sources (in priority order):
#
#   1. **Environment variables**: e.g., SETLIST_API_KEY=abc123
#      (highest priority, always wins)
#   2. **.env file**: key=value lines in the project root .env file
#      (used for local development, never committed)
#
# Field `spotify_client_id` maps to env var `SPOTIFY_CLIENT_ID`.
# Defaults apply when neither source defines a field.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SetlistScout application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Setlist archive (setlist.fm) ===
    setlist_api_key: str = ""

    # === Music catalog (Spotify client-credentials) ===
    spotify_client_id: str = ""
    spotify_client_secret: str = ""

    # === Identity graph (MusicBrainz requires a descriptive User-Agent) ===
    musicbrainz_app_name: str = "SetListScout"
    musicbrainz_app_version: str = "1.0"
    musicbrainz_contact: str = ""

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: list[str] = []

    def missing_credentials(self) -> list[str]:
        """Return the names of upstream credentials that are not configured."""
        missing: list[str] = []
        if not self.setlist_api_key:
            missing.append("setlist_api_key")
        if not self.spotify_client_id:
            missing.append("spotify_client_id")
        if not self.spotify_client_secret:
            missing.append("spotify_client_secret")
        return missing

    def musicbrainz_user_agent(self) -> str:
        """Build the ``App/Version (contact)`` User-Agent MusicBrainz asks for."""
        agent = f"{self.musicbrainz_app_name}/{self.musicbrainz_app_version}"
        if self.musicbrainz_contact:
            agent = f"{agent} ({self.musicbrainz_contact})"
        return agent
