from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    # Service
    PROJECT_NAME: str = "ProMode Product Catalog"
    ENVIRONMENT: str = "development"
    PORT: int = 4000

    # AWS Settings
    AWS_REGION: str = "ap-south-1"
    DYNAMODB_ENDPOINT: Optional[str] = None

    # DynamoDB Tables
    PRODUCTS_TABLE: str = "Products"
    CATEGORY_TABLE_NAME: str = "Category_management"
    CATEGORY_INDEX_NAME: str = "categoryId-index"
    GROUP_INDEX_NAME: str = "groupId-index"

    # Store retry policy
    DB_MAX_RETRIES: int = 3
    DB_RETRY_DELAY_MS: int = 100

    # Logging
    LOG_LEVEL: Optional[str] = None
    LOG_FORMAT: Optional[str] = None

    # Pagination
    DEFAULT_PAGE_LIMIT: int = 20
    MAX_PAGE_LIMIT: int = 100

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
