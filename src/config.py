from pydantic_settings import BaseSettings
from decimal import Decimal
from typing import List, Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: Optional[str] = None
    PGHOST: Optional[str] = None
    PGDATABASE: Optional[str] = None
    PGUSER: Optional[str] = None
    PGPASSWORD: Optional[str] = None
    PGSSLMODE: str = "require"

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Application
    PROJECT_NAME: str = "Bus Ticket Booking Platform"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173", "http://localhost:8080"]

    # Booking
    BOOKING_FEE: Decimal = Decimal("500")
    TAX_RATE: Decimal = Decimal("0.08")
    MAX_SEATS_PER_BOOKING: int = 5
    DEFAULT_SEAT_CAPACITY: int = 40
    DEFAULT_SEAT_PRICE: Decimal = Decimal("4500")
    DEFAULT_DEPARTURE_TIME: str = "08:00 AM"
    BOOKING_FLOW_TTL_MINUTES: int = 30
    CURRENCY: str = "KSh"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.PGHOST and self.PGDATABASE:
            return f"postgresql://{self.PGUSER}:{self.PGPASSWORD}@{self.PGHOST}/{self.PGDATABASE}?sslmode={self.PGSSLMODE}"
        return "sqlite:///./bus_booking.db"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
