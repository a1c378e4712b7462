from pydantic_settings import BaseSettings, SettingsConfigDict

from goodday.core.errors import MissingCredentialError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://goodday:goodday@db:5432/goodday"
    APP_ENV: str = "development"

    # Comma-separated allowed origins, or "*" to allow all.
    CORS_ORIGINS: str = "*"

    # GitHub: token used for reading survey CSVs and committing reports.
    GH_API_KEY: str | None = None
    DEFAULT_GH_OWNER: str = "githubocto"
    DEFAULT_GH_REPO: str = "good-day-demo"
    DATA_FILE_PATH: str = "good-day.csv"
    COMMITTER_NAME: str = "Good Day Bot"
    COMMITTER_EMAIL: str = "octo-devex+goodday@github.com"

    # Slack bot that delivers prompts and summary notifications.
    SLACKBOT_API_URL: str = "http://localhost:3000"
    FUNCTIONS_ID: str = ""
    FUNCTIONS_SECRET: str = ""

    # Reporting week starts on this weekday (lowercase English name).
    WEEK_START: str = "sunday"

    USER_WORKERS: int = 4
    CHART_WORKERS: int = 4

    # 5-field crontab expressions, evaluated in UTC. Numeric weekdays count
    # from Monday=0, so prefer names ("mon").
    WEEKLY_REPORT_CRON: str = "0 13 * * mon"
    REMINDER_CRON: str = "0 * * * *"

    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    def require_github_token(self) -> str:
        if not self.GH_API_KEY:
            raise MissingCredentialError("GH_API_KEY")
        return self.GH_API_KEY


settings = Settings()
