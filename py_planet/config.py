"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="PLANET_", extra="ignore"
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./py_planet.db", description="SQLAlchemy database URL"
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Logging format (json or console)")

    # Planet generation
    planet_radius: float = Field(default=2.0, gt=0, description="Planet radius")
    sphere_width_segments: int = Field(default=64, ge=3, description="Longitude segments")
    sphere_height_segments: int = Field(default=32, ge=2, description="Latitude segments")
    terrain_seed: int = Field(default=12345, ge=0, description="Terrain PRNG seed")
    settlement_seed: int = Field(default=54321, ge=0, description="Settlement PRNG seed")

    # Villages
    village_grid_size: int = Field(default=7, ge=2, description="Village grid cells per side")
    scavenge_spot_count: int = Field(default=3, ge=1, description="Scavenge spots per day")


settings = Settings()
