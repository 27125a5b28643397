"""i-Haru Server Configuration."""

import secrets
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    app_name: str = "i-Haru Server"
    app_version: str = "2026-01-25-1045"  # bump to make polling clients reload
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Paths
    data_dir: Path = Path.home() / "iharu" / "data"

    # Database
    db_path: Path = Path.home() / "iharu" / "data" / "iharu.db"

    # JWT
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 10080  # 7 days

    # Calendar
    timezone: str = "Asia/Seoul"  # "today" for D-day labels and day views

    # Accounts
    password_min_length: int = 6
    reset_token_expire_minutes: int = 30
    invite_code_suffix_length: int = 4

    # Messages
    message_list_limit: int = 50

    # Sync
    sync_poll_interval_seconds: int = 3
    sync_stale_after_seconds: int = 10

    # Mail (password reset codes)
    resend_api_key: str = ""
    mail_from: str = "i-Haru <onboarding@resend.dev>"

    model_config = {"env_prefix": "IHARU_"}

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.data_dir, self.db_path.parent]:
            d.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Generate secrets if not set, persist to file so they survive restarts."""
        secrets_file = self.data_dir / ".secrets"
        saved = {}
        if secrets_file.exists():
            for line in secrets_file.read_text().strip().splitlines():
                if "=" in line:
                    k, v = line.split("=", 1)
                    saved[k.strip()] = v.strip()

        if not self.jwt_secret:
            self.jwt_secret = saved.get("jwt_secret", "") or secrets.token_urlsafe(32)

        # Persist for next restart
        secrets_file.write_text(f"jwt_secret={self.jwt_secret}\n")


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()
