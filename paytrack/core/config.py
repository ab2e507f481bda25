from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    DATABASE_URL: str = "postgresql+asyncpg://paytrack:paytrack_secret@db:5432/paytrack"
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Timing used when an employee has no office+position override
    DEFAULT_DUTY_HOURS: float = 8.0
    DEFAULT_REPORTING_TIME: str = "09:00"

    LATE_GRACE_MINUTES: int = 15
    ABSENCE_GRACE_DAYS: int = 2
    EXCESS_LEAVE_PENALTY_DAYS: float = 2.0

    # Local calendar: 0 = Monday ... 6 = Sunday
    WEEKLY_DAYS_OFF: list[int] = [6]
    PUBLIC_HOLIDAYS: list[str] = []

    # Working-days service: GET <url>?year=&month= -> {"workingDays": n, "days": [...]}
    WORKING_DAYS_API_ENABLED: bool = False
    # Must point at another service: this app's own /api/holidays/working-days
    # route resolves through the same URL.
    WORKING_DAYS_API_URL: str = ""
    WORKING_DAYS_API_TIMEOUT_SEC: float = 10.0


settings = Settings()
