from __future__ import annotations

from dataclasses import dataclass

from pydantic_settings import BaseSettings

# Float comparison tolerances for areas (m²) and money amounts.
AREA_TOLERANCE = 0.01
MONEY_TOLERANCE = 0.01


@dataclass(frozen=True)
class EngineConfig:
    """Process-wide planning constants shared by both engine components."""
    min_lot_area: float = 90.0                 # sqm per micro-villa lot
    social_club_min_percent: int = 10
    social_club_max_percent: int = 30

    parking_spaces_per_lot: int = 2            # mandatory ratio
    parking_space_width: float = 2.5           # m
    parking_space_length: float = 5.0          # m
    parking_aisle_factor: float = 1.4          # +40% for aisles and maneuvering

    maintenance_room_min_area: float = 15.0    # sqm floor
    maintenance_room_recommended_area: float = 20.0
    maintenance_room_extended_area: float = 30.0

    walkway_width: float = 1.5                 # m
    internal_path_factor: float = 0.5          # internal paths as share of perimeter
    landscaping_factor: float = 0.15           # share of parking + maintenance area

    lot_estimate_factor: float = 1.5           # sizing seed: remaining / (min × 1.5)
    quadrant_target_factor: float = 1.2        # four-quadrant lots aim slightly larger

    scenario_budget_seconds: float = 2.0
    analysis_budget_seconds: float = 1.0

    @property
    def parking_space_area(self) -> float:
        return self.parking_space_width * self.parking_space_length


DEFAULT_ENGINE_CONFIG = EngineConfig()


class Settings(BaseSettings):
    min_lot_area: float = DEFAULT_ENGINE_CONFIG.min_lot_area
    walkway_width: float = DEFAULT_ENGINE_CONFIG.walkway_width
    maintenance_room_min_area: float = DEFAULT_ENGINE_CONFIG.maintenance_room_min_area
    scenario_budget_seconds: float = DEFAULT_ENGINE_CONFIG.scenario_budget_seconds
    analysis_budget_seconds: float = DEFAULT_ENGINE_CONFIG.analysis_budget_seconds

    # DOP per USD, used when a financial request does not supply one
    default_exchange_rate: float = 58.5

    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    model_config = {
        "env_prefix": "MICROVILLA_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    def engine_config(self) -> EngineConfig:
        """Build the immutable engine configuration from these settings."""
        return EngineConfig(
            min_lot_area=self.min_lot_area,
            walkway_width=self.walkway_width,
            maintenance_room_min_area=self.maintenance_room_min_area,
            scenario_budget_seconds=self.scenario_budget_seconds,
            analysis_budget_seconds=self.analysis_budget_seconds,
        )


settings = Settings()
