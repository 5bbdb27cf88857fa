"""
Configuration defaults, sourced from ``GENMF_*`` environment variables.

Command-line options win over these values; settings only fill in what
the IDE's recipe line leaves out.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Tool settings"""

    model_config = SettingsConfigDict(
        env_prefix="GENMF_",
        env_file=".env",
        extra="ignore",
    )

    # External build executor
    make_command: str = "make"
    locale: str = "C"

    # Verbosity
    verbose: int = 3
    keep_intermediates_level: int = 10  # sidecars survive at or above this

    # Debug sink
    syslog: bool = True
    syslog_address: str = "/dev/log"
