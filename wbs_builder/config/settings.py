"""
Configuration settings for the equipment WBS builder.
Load configuration from environment variables or a .env file.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_file = Path(__file__).parent.parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)


class Settings:
    """Application settings loaded from environment variables."""

    # Project paths
    PROJECT_ROOT = Path(__file__).parent.parent.parent
    DATA_DIR = Path(os.getenv('WBS_DATA_DIR', str(PROJECT_ROOT / 'data')))
    OUTPUT_DATA_DIR = Path(os.getenv('WBS_OUTPUT_DIR', str(DATA_DIR / 'output')))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = Path(os.getenv('LOG_DIR', str(PROJECT_ROOT / 'logs')))

    # ============================================================================
    # WBS Generation
    # ============================================================================
    PROJECT_NAME = os.getenv('WBS_PROJECT_NAME', 'Equipment Commissioning Project')
    # Subsystem label applied to equipment that carries none ("<name> - <code>")
    DEFAULT_SUBSYSTEM = os.getenv('WBS_DEFAULT_SUBSYSTEM', 'Main Subsystem - +Z01')

    # ============================================================================
    # Export
    # ============================================================================
    EXPORT_PREFIX = os.getenv('WBS_EXPORT_PREFIX', 'WBS_Export_')
    EXPORT_DATE_FORMAT = '%Y-%m-%d'

    @classmethod
    def validate_required_settings(cls) -> list[str]:
        """
        Validate that all required settings are configured.
        Returns list of missing required settings.
        """
        missing = []

        if not cls.PROJECT_NAME:
            missing.append('WBS_PROJECT_NAME')
        if not cls.DEFAULT_SUBSYSTEM:
            missing.append('WBS_DEFAULT_SUBSYSTEM')

        return missing


# Create settings instance
settings = Settings()
