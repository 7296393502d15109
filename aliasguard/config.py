import json
from pathlib import Path
from typing import Dict, Any, Optional

from aliasguard.models import ShellDialect
from aliasguard.retention import RetentionPolicy


class Config:
    """Manage aliasguard configuration and themes"""

    THEMES = {
        "default": {
            "border_color": "cyan",
            "header_color": "cyan",
            "success_color": "green",
            "warning_color": "yellow",
            "error_color": "red",
        },
        "ocean": {
            "border_color": "blue",
            "header_color": "bright_blue",
            "success_color": "green",
            "warning_color": "bright_yellow",
            "error_color": "bright_red",
        },
        "forest": {
            "border_color": "green",
            "header_color": "bright_green",
            "success_color": "bright_green",
            "warning_color": "yellow",
            "error_color": "red",
        },
        "monochrome": {
            "border_color": "white",
            "header_color": "bright_white",
            "success_color": "white",
            "warning_color": "white",
            "error_color": "bright_white",
        },
    }

    DEFAULT_CONFIG = {
        "theme": "default",
        "shell": None,
        "config_file": None,
        "backup_dir": None,
        "recent_backups": 10,
        "max_backups": 20,
        "confirm_delete": True,
    }

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or Path.home() / ".aliasguard"
        self.config_path = self.config_dir / "config.json"
        self.config = self.load()

    def load(self) -> Dict[str, Any]:
        """Load configuration from file"""
        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    user_config = json.load(f)
                    return {**self.DEFAULT_CONFIG, **user_config}
            except (json.JSONDecodeError, OSError, TypeError):
                pass
        return self.DEFAULT_CONFIG.copy()

    def save(self) -> None:
        """Save configuration to file"""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            json.dump(self.config, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value"""
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value"""
        self.config[key] = value
        self.save()

    def get_theme(self) -> Dict[str, str]:
        """Get current theme colors"""
        theme_name = self.config.get("theme", "default")
        return self.THEMES.get(theme_name, self.THEMES["default"])

    def get_dialect(self) -> Optional[ShellDialect]:
        """Configured shell, or None to auto-detect"""
        shell = self.config.get("shell")
        return ShellDialect.from_name(shell) if shell else None

    def get_path(self, key: str) -> Optional[Path]:
        value = self.config.get(key)
        return Path(value).expanduser() if value else None

    def retention_policy(self) -> RetentionPolicy:
        """Retention counts from config, defaults if they are unusable"""
        try:
            return RetentionPolicy(
                recent_count=int(self.config.get("recent_backups")),
                max_total=int(self.config.get("max_backups")),
            )
        except (TypeError, ValueError):
            return RetentionPolicy()
