from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    log_level: str = "INFO"
    service_duration_minutes: int = 120
    turnover_buffer_minutes: int = 60
    slot_interval_minutes: int = 30
    suggestion_ttl_hours: int = 24
    max_suggestions: int = 5
    restaurant_timezone: str = "UTC"
    holiday_country: str = ""
    activity_webhook_url: str = ""
    sweep_interval_seconds: int = 3600
    data_file: str = ""
