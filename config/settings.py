import logging
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root
PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    # AWS
    aws_region: str = "us-east-1"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""

    # Athena
    aws_athena_database: str = "recipedb"
    aws_athena_workgroup: str = "primary"
    aws_athena_output_location: str = ""
    athena_poll_interval: float = 1.0
    athena_query_timeout: float = 300.0

    # Tables
    recipes_table: str = "cutoff10_recipes_veg_non_veg_sm"
    ingredients_table: str = "ingredient_details_server"
    mapped_cf_table: str = "recipedb_mapped_ing_cf_count"
    # Column behind maxCookTime; empty disables the filter
    recipe_cook_time_column: str = ""

    # Carbon footprint lookups in flight per request
    cf_lookup_concurrency: int = 1

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


_settings: Settings | None = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

def configure_logging(settings: Settings | None = None) -> None:
    """Root handler + LOG_LEVEL; safe to call from every process that serves the app"""
    settings = settings or get_settings()
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(settings.log_level.upper())
