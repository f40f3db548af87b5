import json
from pathlib import Path
from typing import Any, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    APP_NAME: str = "Party Compass"
    APP_VERSION: str = "1.0.0"

    # Pasta com questions.json e parties.json
    DATA_DIR: Path = Field(default=PACKAGE_DIR / "data")

    # Escala do compasso: -AXIS_RANGE..+AXIS_RANGE em cada eixo
    AXIS_RANGE: float = Field(default=10.0)
    SCORE_MULTIPLIER: float = Field(default=1.0)
    DIRECTION_EPSILON: float = Field(default=0.1)

    # Valores de calibração, sem derivação formal; ajustar contra dados reais
    DISTANCE_INFLATION: float = Field(default=2.5)
    TIE_THRESHOLD: float = Field(default=9.0)

    SIGNIFICANT_DIFFERENCE: int = Field(default=2)
    KEY_DIFFERENCES_LIMIT: int = Field(default=5)
    COMMON_GROUND_LIMIT: int = Field(default=3)

    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)
    CORS_ORIGINS: str = Field(default="*")

    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("AXIS_RANGE", "DISTANCE_INFLATION", "SCORE_MULTIPLIER")
    @classmethod
    def must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("TIE_THRESHOLD", "DIRECTION_EPSILON")
    @classmethod
    def must_not_be_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        raw = (self.CORS_ORIGINS or "").strip()
        if not raw:
            return ["*"]

        if raw.startswith("["):
            try:
                origins: Any = json.loads(raw)
            except json.JSONDecodeError:
                origins = None
            if isinstance(origins, list):
                return [str(x) for x in origins if str(x).strip()]

        return [x.strip() for x in raw.split(",") if x.strip()]


settings = Settings()


__all__ = ["settings", "Settings", "PACKAGE_DIR"]
