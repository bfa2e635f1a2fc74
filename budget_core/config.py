"""
Configuration for the budget engine and its streamlit shell.

Values come from environment variables prefixed with BUDGET_ (for example
BUDGET_LOG_LEVEL=DEBUG or BUDGET_DONUT_INNER_RADIUS=0.55). Chart sizes are
turned into the explicit DonutConfig / BarConfig structures the geometry
functions take, so the engine itself never reads the environment.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from budget_core.geometry import BarConfig, DonutConfig

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()


class EngineSettings(BaseSettings):
    """Engine, logging and chart settings."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Render log events as JSON")

    seed_path: Path = Field(
        default=_PROJECT_ROOT / "data" / "seed.json",
        description="Sample data loaded by the shell on first run",
    )
    currency_symbol: str = Field(default="$")

    donut_inner_radius: float = Field(default=0.5, gt=0, le=1)
    donut_outer_radius: float = Field(default=0.8, gt=0, le=1)

    bar_width: float = Field(default=35.0, ge=0)
    bar_gap: float = Field(default=10.0, ge=0)
    group_gap: float = Field(default=10.0, ge=0)
    plot_height: float = Field(default=150.0, ge=0)

    @model_validator(mode="after")
    def check_ring(self) -> "EngineSettings":
        if self.donut_inner_radius >= self.donut_outer_radius:
            raise ValueError("donut_inner_radius must be smaller than donut_outer_radius")
        return self

    def donut_config(self) -> DonutConfig:
        return DonutConfig(
            inner_radius=self.donut_inner_radius,
            outer_radius=self.donut_outer_radius,
        )

    def bar_config(self) -> BarConfig:
        return BarConfig(
            bar_width=self.bar_width,
            bar_gap=self.bar_gap,
            group_gap=self.group_gap,
            plot_height=self.plot_height,
        )


@lru_cache
def get_settings() -> EngineSettings:
    return EngineSettings()
