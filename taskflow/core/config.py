from os import getenv

DEFAULT_SESSION_SECRET = "taskflow-secret-key-change-in-production"


class Settings:
    DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://taskflow:taskflow@db:5432/taskflow")

    # Clé de signature des sessions, fallback faible si non définie (warning au démarrage)
    SESSION_SECRET = getenv("SESSION_SECRET", DEFAULT_SESSION_SECRET)
    SESSION_EXPIRE_DAYS = int(getenv("SESSION_EXPIRE_DAYS", "7"))  #expire au bout de 7 jours
    SESSION_COOKIE_NAME = getenv("SESSION_COOKIE_NAME", "taskflow_token")

    APP_ENV = getenv("APP_ENV", "development")
    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:5000")

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def uses_default_secret(self) -> bool:
        return self.SESSION_SECRET == DEFAULT_SESSION_SECRET

    def get_cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
