from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from imgtrans.constants import TTL


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_timeout: float = 2.0

    # Storage (비어 있으면 프로젝트 루트의 uploads/)
    upload_dir: str = ""

    # App
    base_url: str = "http://localhost:8000"
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Recognition
    recognition_provider: str = "tesseract"  # "tesseract" | "gemini_vision"
    tesseract_lang: str = "eng+chi_sim"
    min_confidence: float = 60.0
    min_region_size: int = 5

    # Translation
    translation_provider: str = "gemini"  # "gemini" | "openai" | "none"
    translation_timeout: int = 60
    translation_max_concurrency: int = 8
    batch_format: str = "numbered"  # "numbered" | "json"

    # Gemini API
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash-lite"

    # OpenAI 호환 API (DeepSeek 등)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.deepseek.com"
    openai_model: str = "deepseek-chat"

    # Rendering
    font_path: str = ""
    output_format: str = "PNG"  # "PNG" | "JPEG"

    # Result cache
    result_cache_enabled: bool = True
    result_cache_ttl: int = TTL.RESULT


@lru_cache
def get_settings() -> Settings:
    return Settings()
