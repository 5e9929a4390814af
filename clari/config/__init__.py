"""Runtime configuration."""

from .settings import AwsConfig, DeployConfig, Settings, settings

__all__ = ["AwsConfig", "DeployConfig", "Settings", "settings"]
