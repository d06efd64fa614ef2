from typing import List, Optional
from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = "RealmHunter"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",  # Frontend development
        "https://app.realmhunter.io",  # Production frontend
    ]

    # Redis Settings
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 10

    # PostgreSQL Settings
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "realmhunter"
    POSTGRES_MIN_POOL_SIZE: int = 5
    POSTGRES_MAX_POOL_SIZE: int = 20
    DB_LOGGING_ENABLED: bool = False
    DB_QUERY_TIMEOUT: float = 10.0

    # HTTP Client Settings (seconds)
    HTTP_DEFAULT_TIMEOUT: float = 15.0
    HTTP_NOTION_TIMEOUT: float = 20.0
    HTTP_PLAYFAB_TIMEOUT: float = 10.0
    HTTP_MAX_CONNECTIONS: int = 100
    HTTP_MAX_KEEPALIVE_CONNECTIONS: int = 20

    # Chain Settings
    CHAIN_RPC_URL: str = "https://data-seed-prebsc-1-s1.binance.org:8545"
    CHAIN_ID: int = 97  # BSC Testnet
    CHAIN_RPC_TIMEOUT: float = 15.0
    TX_CONFIRMATION_TIMEOUT: float = 120.0
    ADMIN_PRIVATE_KEY: Optional[str] = None  # Minting / custodial signer
    TREASURY_ADDRESS: Optional[str] = None  # Receives claim fees and deposits, defaults to signer
    REALM_SHARDS_ADDRESS: Optional[str] = None  # RES token (backs xRES)
    REALM_CRYSTALS_ADDRESS: Optional[str] = None  # REC token (backs xREC)
    GENESIS_NBMON_ADDRESS: Optional[str] = None

    # Notion (content catalog) Settings
    NOTION_API_URL: str = "https://api.notion.com/v1"
    NOTION_TOKEN: Optional[str] = None
    NOTION_VERSION: str = "2022-06-28"
    NBPEDIA_DATABASE_ID: Optional[str] = None
    PASSIVES_DATABASE_ID: Optional[str] = None
    TYPES_DATABASE_ID: Optional[str] = None

    # PlayFab (player accounts) Settings
    PLAYFAB_TITLE_ID: Optional[str] = None
    PLAYFAB_SECRET_KEY: Optional[str] = None

    # Claim/Deposit locking
    CLAIM_LOCK_TIMEOUT_SECONDS: float = 300.0  # Max time a lock is held (covers mint confirmation)
    CLAIM_LOCK_WAIT_SECONDS: float = 5.0  # Max time to wait for a concurrent claim to finish

    class Config:
        env_file = ".env"
        case_sensitive = True

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
