from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    MOCO_API_KEY: str = ""
    MOCO_SUBDOMAIN: str = ""
    MOCO_API_TIMEOUT_SEC: float = 10.0

    # 1 рабочий день = 8 часов (отпуска и больничные считаются в днях)
    HOURS_PER_WORKDAY: float = 8.0

    # Коды назначений /schedules зависят от настроек аккаунта MoCo;
    # значения ниже проверены только на одном тенанте
    VACATION_ABSENCE_CODES: list[str] = ["4"]
    SICK_DAY_ABSENCE_CODES: list[str] = ["3"]
    PUBLIC_HOLIDAY_ABSENCE_CODES: list[str] = ["2"]

    MIN_REPORT_YEAR: int = 2000

    LOG_LEVEL: str = "INFO"

    @property
    def moco_base_url(self) -> str:
        return f"https://{self.MOCO_SUBDOMAIN}.mocoapp.com/api/v1"


settings = Settings()
