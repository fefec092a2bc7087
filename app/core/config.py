import json
from typing import Dict, List, Union
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "RetailOps Backend"
    env: str = "dev"

    # DATABASE
    database_url: str
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=20, ge=0, le=200)
    db_pool_timeout_seconds: int = Field(default=30, ge=1, le=300)
    db_pool_recycle_seconds: int = Field(default=1800, ge=30, le=86_400)

    # LOCATIONS
    locations: Dict[str, str] = Field(
        default_factory=lambda: {
            "001": "Main Warehouse",
            "002": "Shop 1",
            "003": "Shop 2",
            "004": "Online Store",
            "005": "Shop 3",
        }
    )
    warehouse_location_code: str = "001"

    # INVENTORY
    low_stock_default_threshold: int = Field(default=10, ge=0)
    movements_history_limit: int = Field(default=50, ge=1, le=500)
    transfer_reference_prefix: str = Field(default="TRF", min_length=1, max_length=10)
    api_timeout_hint_ms: int = Field(default=30000, ge=1000, le=1_800_000)

    # CORS
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    cors_origin_regex: str | None = None

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            if not v.strip():
                return []
            if v.startswith("["):
                parsed = json.loads(v)
                if not isinstance(parsed, list):
                    raise ValueError("CORS_ORIGINS JSON value must be a list")
                return [str(i).strip() for i in parsed if str(i).strip()]
            return [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            return [str(i).strip() for i in v if str(i).strip()]
        raise ValueError(v)

    @field_validator("locations", mode="before")
    @classmethod
    def assemble_locations(cls, v: Union[str, Dict[str, str]]) -> Dict[str, str]:
        if isinstance(v, str):
            parsed = json.loads(v)
            if not isinstance(parsed, dict):
                raise ValueError("LOCATIONS JSON value must be an object")
            v = parsed
        if not isinstance(v, dict):
            raise ValueError(v)
        cleaned = {str(code).strip(): str(name).strip() for code, name in v.items() if str(code).strip()}
        if not cleaned:
            raise ValueError("At least one location must be configured")
        return cleaned

    @model_validator(mode="after")
    def validate_locations(self) -> "Settings":
        if self.warehouse_location_code not in self.locations:
            raise ValueError("WAREHOUSE_LOCATION_CODE must be one of the configured LOCATIONS")
        reserved = {"vendor", "customer"}
        if reserved & set(self.locations):
            raise ValueError("'vendor' and 'customer' are ledger markers, not locations")
        return self

    @model_validator(mode="after")
    def validate_production_safety(self) -> "Settings":
        env_value = self.env.lower().strip()
        if env_value not in {"prod", "production"}:
            return self

        if self.database_url.lower().startswith("sqlite"):
            raise ValueError("DATABASE_URL cannot point at SQLite in production")
        if "*" in self.cors_origins:
            raise ValueError("CORS_ORIGINS cannot contain '*' in production")
        if self.cors_origin_regex:
            raise ValueError("CORS_ORIGIN_REGEX cannot be set in production")

        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        enable_decoding=False,
    )


settings = Settings()
