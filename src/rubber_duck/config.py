"""Runtime configuration for Rubber Duck."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="RUBBER_DUCK_", env_file=".env", extra="ignore")

    app_name: str = "rubber-duck"
    log_level: str = "INFO"
    state_path: str = Field(
        default="data/world_state.json",
        description="Where the world snapshot is saved between runs.",
    )
    seed: int | None = Field(
        default=None,
        description="Seed for new worlds. A random seed is drawn when unset.",
    )
    duck_name: str = "Quackers"
    duplicate_blueprint_policy: Literal["resume", "reject", "parallel"] = Field(
        default="resume",
        description="What 'create' does when a project for the same item is already open.",
    )
    inventory_capacity: float = 50.0
    resource_cooldown_ticks: int = Field(
        default=12,
        description="Ticks a depleted bush or stand of trees needs before it regrows.",
    )
    weather_interval_ticks: int = 6
    failure_xp_ratio: float = Field(
        default=0.4,
        description="Share of the full XP award granted when a skill check fails.",
    )
    autosave: bool = True


settings = Settings()
