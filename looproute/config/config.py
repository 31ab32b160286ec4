from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # OpenRouteService configuration
    ors_api_key: str = ""
    ors_base_url: str = "https://api.openrouteservice.org"
    ors_profile: str = "driving-car"
    request_timeout_s: float = 10.0

    # Snap search radius in meters
    snap_radius_m: int = 300

    # API configuration
    api_version: str = "1.0"

    # API call limits (free OpenRouteService keys allow 40 calls/minute)
    max_api_calls_per_minute: int = 40
    max_api_calls_per_day: int = 2000

    # Ring radius search bounds in km
    min_radius_km: float = 0.5
    max_radius_km: float = 10.0

    # Arc spans generated for every request, in output order
    arc_spans: List[float] = [360.0, 270.0]

    # "best_effort" drops failed variants, "all_or_nothing" fails the request
    variant_policy: str = "best_effort"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
