from pydantic_settings import BaseSettings
from typing import Optional, List
import os

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "MedBook Appointment Service"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    TESTING: bool = os.getenv("TESTING", "0").lower() in ("1", "true", "t", "yes", "y")

    # Document store
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./medbook.db")
    TEST_DATABASE_URL: str = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")

    # Security
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 15
    BCRYPT_ROUNDS: int = 10

    # Payments (Stripe Checkout)
    STRIPE_API_KEY: Optional[str] = None
    STRIPE_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_CURRENCY: str = "usd"
    CLIENT_SITE_URL: str = "http://localhost:5173"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://testserver"]

    @property
    def get_database_url(self):
        """Return the appropriate database URL based on if we're testing"""
        if self.TESTING:
            return self.TEST_DATABASE_URL
        return self.DATABASE_URL

    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()
