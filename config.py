import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # Data files
    books_file: str = os.getenv("LIBRARY_BOOKS_FILE", "books.dat")
    users_file: str = os.getenv("LIBRARY_USERS_FILE", "users.dat")
    # Save both files when a session closes
    autosave: bool = _env_flag("LIBRARY_AUTOSAVE", "True")

    # Logging
    log_level: str = os.getenv("LIBRARY_LOG_LEVEL", "WARNING").upper()

    # Application
    app_name: str = os.getenv("APP_NAME", "Smart Library")
    debug: bool = _env_flag("DEBUG", "False")

    def __post_init__(self) -> None:
        # DEBUG overrides the configured level
        if self.debug:
            self.log_level = "DEBUG"


settings = Settings()
