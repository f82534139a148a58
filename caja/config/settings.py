from decimal import Decimal
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # App Info
    app_name: str = "Caja POS API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./caja.db"
    sqlite_busy_timeout: int = Field(
        default=30,
        description="Segundos que una transacción SQLite espera el bloqueo de escritura"
    )

    # Caja
    currency: str = "CLP"
    cash_rounding_step: Decimal = Field(
        default=Decimal("10"),
        description="Múltiplo al que se redondean los pagos en efectivo"
    )

    # CORS
    allowed_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    class Config:
        env_file = ".env"
        case_sensitive = False

settings = Settings()
