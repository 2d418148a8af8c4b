# ============================================================================
# src/rx_matching/config/base_config.py
# ============================================================================
"""
Base Configuration
- Project root
- Data directory
- Catalog database and seed file
"""

from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

class BaseSettingsConfig(BaseSettings):
    # Root project directory
    PROJECT_ROOT: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent.parent.parent,
        description="Root directory of the project"
    )

    DATA_DIR: Path = Field(
        default=Path("data"),
        description="Directory holding the catalog database and seed files"
    )

    # Product catalog
    CATALOG_DB_PATH: Path = Field(
        default=Path("data/catalog/catalog.db"),
        description="SQLite database holding the read-only product catalog"
    )
    CATALOG_SEED_PATH: Path = Field(
        default=Path("data/catalog/sample_products.json"),
        description="JSON product list used to (re)build the catalog database"
    )

    def create_directories(self):
        """Create all necessary directories if they don't exist"""
        dirs = [
            self.DATA_DIR,
            self.CATALOG_DB_PATH.parent,
        ]
        for directory in dirs:
            directory.mkdir(parents=True, exist_ok=True)

# Global instance
base_settings = BaseSettingsConfig()
