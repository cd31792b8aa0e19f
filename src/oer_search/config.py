from typing import List, Optional

from pydantic import AnyHttpUrl, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Index engine
    elasticsearch_url: AnyHttpUrl = "http://127.0.0.1:9200"
    elasticsearch_index: str = "oer_materials"
    elasticsearch_timeout: float = 30.0

    # Secondary image provider
    image_search_url: AnyHttpUrl = "https://api.creativecommons.engineering"
    image_search_token: SecretStr = SecretStr("")
    image_search_sources: str = "wikimedia,flickr,met,museumsvictoria,smithsonian_national_museum_of_natural_history"
    image_search_timeout: float = 15.0

    # Navigation links
    search_base_url: str = "https://platform.x5gon.org/api/v2/search"
    recommend_base_url: str = "https://platform.x5gon.org/api/v1/recommend/materials"

    # Bearer tokens for the mutating routes
    jwt_secret: SecretStr
    jwt_algo: str = "HS256"
    jwt_issuer: str = "x5gon-platform"
    jwt_audience: str = "oer-search"

    log_level: str = "INFO"
    log_file: Optional[str] = None

    # 0 disables the background refresh of the language cache
    language_refresh_interval: int = 0

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    @property
    def image_sources(self) -> List[str]:
        return [s.strip() for s in self.image_search_sources.split(",") if s.strip()]

settings = Settings()
