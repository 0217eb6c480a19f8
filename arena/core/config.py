from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    SUPABASE_URL: str = "http://localhost:54321"
    SUPABASE_ANON_KEY: str = "YOUR_SUPABASE_ANON_KEY_HERE"
    SECRET_KEY: str = "YOUR_SECRET_KEY_HERE"
    SITE_URL: str = "http://localhost:8000" # Base URL for email confirmation redirects
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_BASE_DELAY: float = 0.5
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()

def get_settings() -> Settings:
    return settings
