"""Configuration management for the interview task store."""

from dataclasses import dataclass
import os


KNOWN_BACKENDS = ("memory", "sql")
KNOWN_PASSWORD_SCHEMES = ("argon2", "bcrypt", "pbkdf2_sha256", "sha256_crypt")


@dataclass
class Config:
    # General
    debug: bool = os.getenv("APP_DEBUG", "False").lower() == "true"

    # Storage Configuration
    storage_backend: str = os.getenv("STORAGE_BACKEND", "memory")  # memory or sql
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///interview_tasks.db")
    seed_defaults: bool = os.getenv("SEED_DEFAULTS", "True").lower() == "true"

    # Password Hashing Configuration
    password_schemes: str = os.getenv("PASSWORD_SCHEMES", "argon2,bcrypt")

    # Task Ledger Configuration
    task_retention_days: int = int(os.getenv("TASK_RETENTION_DAYS", "30"))
    recent_tasks_limit: int = int(os.getenv("RECENT_TASKS_LIMIT", "5"))

    # Interview Task Configuration
    default_task_creator: str = os.getenv("DEFAULT_TASK_CREATOR", "admin@test.com")
    enforce_task_settings: bool = os.getenv("ENFORCE_TASK_SETTINGS", "False").lower() == "true"

    @property
    def password_scheme_list(self) -> list[str]:
        """Configured hash schemes, preferred first."""
        return [s.strip() for s in self.password_schemes.split(",") if s.strip()]

    def validate(self) -> bool:
        """
        Validate configuration settings.

        Returns:
            True if all validations pass, False otherwise
        """
        ok = True

        if self.storage_backend not in KNOWN_BACKENDS:
            print(f"⚠️  ERROR: STORAGE_BACKEND '{self.storage_backend}' is not one of {', '.join(KNOWN_BACKENDS)}")
            ok = False

        if self.storage_backend == "sql" and not self.database_url:
            print("⚠️  ERROR: DATABASE_URL is required for the sql backend")
            ok = False

        schemes = self.password_scheme_list
        if not schemes:
            print("⚠️  ERROR: PASSWORD_SCHEMES is empty")
            ok = False
        for scheme in schemes:
            if scheme not in KNOWN_PASSWORD_SCHEMES:
                print(f"⚠️  ERROR: Unknown password scheme '{scheme}'")
                ok = False

        if self.task_retention_days <= 0:
            print(f"⚠️  ERROR: TASK_RETENTION_DAYS must be positive (got {self.task_retention_days})")
            ok = False

        if self.recent_tasks_limit <= 0:
            print(f"⚠️  ERROR: RECENT_TASKS_LIMIT must be positive (got {self.recent_tasks_limit})")
            ok = False

        if self.storage_backend == "memory" and not self.debug:
            print("⚠️  WARNING: memory backend keeps nothing across restarts")

        return ok


config = Config()
