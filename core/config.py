# core/config.py

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent

class Settings(BaseSettings):
    """Loads application settings from .env file."""
    data_dir: Path = PROJECT_ROOT / "data"

    # Artificial store delay, stands in for a remote API
    simulate_latency: bool = True

    # Dashboard and list page limits
    upcoming_task_limit: int = 5
    top_category_limit: int = 5
    recent_activity_limit: int = 5

    class Config:
        env_file = ".env"

# Create a single, reusable instance of the settings
settings = Settings()
