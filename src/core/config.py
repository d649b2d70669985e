"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_EMPLOYEE_OPTIONS = (
    "Ayu,Budi,Citra,Dimas,Eka,Farah,Galih,Hana,Indra,Joko,"
    "Kirana,Laras,Made,Nadia,Oka,Putri,Raka,Sari,Tegar,Wulan"
)


class Settings(BaseSettings):
    """Vocal Review settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        transcription_provider: STT backend ("gemini", "whisper" or "none").
        gcp_audio_bucket: Bucket that archives the raw recordings.
        google_sheets_id: Spreadsheet that receives one row per review.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Application ---
    app_host: str = "0.0.0.0"  # Bind address for the FastAPI server
    app_port: int = 3000
    log_level: str = "INFO"  # Python logging level
    static_dir: str = ""  # Landing page dir for GET /*; empty = bundled src/api/static
    max_audio_bytes: int = 20 * 1024 * 1024  # Per-file upload cap

    # --- Transcription ---
    # "gemini" = hosted multimodal API, "whisper" = local faster-whisper, "none" = skip
    transcription_provider: str = "gemini"
    transcription_language: str = "id"  # ISO 639-1 hint, recordings are Indonesian

    gemini_api_key: str = ""  # Empty = transcription skipped with a warning
    gemini_model: str = "gemini-2.5-pro-latest"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout: float = 120.0

    whisper_model: str = "base"  # Model size: tiny, base, small, medium, large-v3
    whisper_device: str = "cpu"
    whisper_compute_type: str = "int8"

    # --- Google Cloud Storage ---
    gcp_audio_bucket: str = ""  # Empty = recordings are not archived
    google_application_credentials_json: str = ""  # Inline service-account JSON

    # --- Google Sheets ---
    google_sheets_id: str = ""  # Empty = rows are not appended
    google_sheets_range: str = "A:J"
    google_service_account_email: str = ""
    google_service_account_key: str = ""  # PEM, literal "\n" sequences allowed

    # --- Wizard UI ---
    api_base_url: str = "http://localhost:3000"  # Backend the wizard submits to
    wizard_url: str = "http://localhost:8501"  # Streamlit wizard address
    employee_options: str = DEFAULT_EMPLOYEE_OPTIONS  # Comma-separated peer names
    # "browser" = st.audio_input in the reviewer's browser, "local" = sounddevice on this host
    microphone_backend: str = "browser"
    playback_dir: str = ""  # Root for per-session playback files; empty = system temp dir
    playback_ttl_hours: int = 24  # Session dirs older than this are purged at startup

    @property
    def employee_names(self) -> list[str]:
        """Peer names offered in the nomination step, in configured order."""
        return [name.strip() for name in self.employee_options.split(",") if name.strip()]

    @property
    def service_account_private_key(self) -> str:
        """Service-account key with escaped newlines restored."""
        return self.google_service_account_key.replace("\\n", "\n")


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
