"""Configuration management for the support agents add-on."""

from datetime import datetime
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Add-on settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Option storage
    option_storage_path: Path = Field(
        default=Path.home() / ".support-agents" / "options",
        description="Directory holding the network option store",
    )
    option_prefix: str = Field(
        default="wp_ultimo_support_agents_",
        description="Prefix applied to every option name written by the add-on",
    )

    # Capability resolution
    inherit_admin_capabilities: bool = Field(
        default=True,
        description="Merge the granting admin's capabilities into each agent's "
        "effective set. If False, agents only get what was granted to them.",
    )
    platform_marker: str = Field(
        default="[WU]",
        description="Marker prefixed to platform capability titles in listings, "
        "distinguishing them from built-in WordPress capabilities.",
    )

    # Admin pages
    admin_base_url: str = Field(
        default="/wp-admin/network/admin.php",
        description="Network admin page URL used to build redirect links",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Path = Field(
        default=Path.home() / ".support-agents" / "logs",
        description="Directory for log files",
    )

    @field_validator("option_prefix")
    @classmethod
    def validate_option_prefix(cls, v: str) -> str:
        """Option names must stay valid identifiers once prefixed."""
        if not v or not v.replace("_", "").replace("-", "").isalnum():
            raise ValueError("option_prefix must be a non-empty alphanumeric slug")
        return v

    def __init__(self, **kwargs):
        """Initialize settings and create necessary directories."""
        super().__init__(**kwargs)
        self.option_storage_path.mkdir(parents=True, exist_ok=True)
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def get_log_file(self, component_name: str = "support_agents") -> Path:
        """Get a log file path for a specific component.

        Creates log files with the format: {component_name}_{date}.log

        Args:
            component_name: Name of the component (cli, admin, etc.)

        Returns:
            Path to the log file
        """
        date_str = datetime.now().strftime("%Y-%m-%d")
        safe_name = "".join(c if c.isalnum() or c in "_-" else "_" for c in component_name)
        return self.log_dir / f"{safe_name}_{date_str}.log"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the shared settings instance, creating it if necessary."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
