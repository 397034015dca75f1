"""
Application Configuration
Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path

from crawler.config import CrawlSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    api_debug: bool = False

    # CORS Configuration
    cors_origins: List[str] = ["*"]  # Allow all origins for development

    # Crawl Configuration
    crawl_headless: bool = True
    crawl_batch_size: int = 2
    crawl_listing_timeout: float = 30.0
    crawl_detail_timeout: float = 20.0
    crawl_scroll_settle: float = 1.0
    crawl_click_settle: float = 2.0
    crawl_max_stall_attempts: int = 5

    # Seconds between keep-alive comments on the progress stream
    progress_keepalive_seconds: float = 15.0

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Paths
    @property
    def log_dir(self) -> Path:
        """Get the log directory path."""
        return Path(__file__).parent.parent.parent / "logs"

    @property
    def log_file(self) -> Path:
        """Get the log file path."""
        return self.log_dir / "backend.log"

    @property
    def export_dir(self) -> Path:
        """Directory for Excel files waiting to be downloaded."""
        return Path(__file__).parent.parent / "exports"

    def crawl_settings(self) -> CrawlSettings:
        """Build the engine's crawl constants from these settings."""
        return CrawlSettings(
            batch_size=self.crawl_batch_size,
            headless=self.crawl_headless,
            listing_timeout=self.crawl_listing_timeout,
            detail_timeout=self.crawl_detail_timeout,
            scroll_settle_seconds=self.crawl_scroll_settle,
            click_settle_seconds=self.crawl_click_settle,
            max_stall_attempts=self.crawl_max_stall_attempts,
        )

    class Config:
        # Only load .env if it exists to avoid permission errors
        env_file = ".env" if Path(".env").exists() else None
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables


# Global settings instance
settings = Settings()
