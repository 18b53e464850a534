from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Input longer than this is cut from the tail before matching
    max_text_length: int = 100_000

    # Heuristic distances in characters
    dfg_merge_distance: int = 120
    joint_funding_distance: int = 50

    footnote_search_limit: int = 2000

    cache_size: int = 100
    china_only: bool = False

    config_dir: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="FUNDING_SCANNER_",
        case_sensitive=False,
    )


settings = Settings()
