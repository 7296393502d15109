"""Shell detection and startup file discovery"""

import os
import pwd
from pathlib import Path
from typing import Dict, Optional

from aliasguard.models import ShellDialect
from aliasguard.shell_config import default_config_path


class ShellDetector:
    """Work out which shell dialect the user's aliases are written in"""

    # Candidate startup files, most likely first
    CONFIG_FILES = {
        ShellDialect.BASH: [".bashrc", ".bash_profile", ".bash_aliases", ".profile"],
        ShellDialect.ZSH: [".zshrc", ".zshenv", ".zprofile", ".zsh_aliases"],
        ShellDialect.FISH: [".config/fish/config.fish"],
    }

    VERSION_VARIABLES = [
        ("BASH_VERSION", ShellDialect.BASH),
        ("ZSH_VERSION", ShellDialect.ZSH),
        ("FISH_VERSION", ShellDialect.FISH),
    ]

    def __init__(self, home_dir: Optional[Path] = None):
        """Initialize detector with home directory"""
        self.home_dir = home_dir or Path.home()

    def detect_current_shell(self) -> ShellDialect:
        """Detect the user's shell, defaulting to bash"""
        # Method 1: version variables exported by the running shell
        for variable, dialect in self.VERSION_VARIABLES:
            if os.environ.get(variable):
                return dialect

        # Method 2: SHELL environment variable
        dialect = ShellDialect.from_name(os.environ.get("SHELL", ""))
        if dialect is not ShellDialect.UNKNOWN:
            return dialect

        # Method 3: login shell from /etc/passwd
        try:
            dialect = ShellDialect.from_name(pwd.getpwuid(os.getuid()).pw_shell)
            if dialect is not ShellDialect.UNKNOWN:
                return dialect
        except (KeyError, OSError):
            pass

        # Method 4: parent process name
        dialect = self._detect_from_parent_process()
        if dialect is not ShellDialect.UNKNOWN:
            return dialect

        # Method 5: existing startup files as a hint
        hint = self._get_shell_hints_from_configs()
        if hint:
            return hint

        return ShellDialect.BASH

    def _detect_from_parent_process(self) -> ShellDialect:
        try:
            import psutil

            parent_name = psutil.Process(os.getppid()).name()
        except (ImportError, Exception):
            return ShellDialect.UNKNOWN
        return ShellDialect.from_name(parent_name)

    def _get_shell_hints_from_configs(self) -> Optional[ShellDialect]:
        """Get shell type hints from existing configuration files"""
        for dialect in (ShellDialect.BASH, ShellDialect.ZSH, ShellDialect.FISH):
            if (self.home_dir / self.CONFIG_FILES[dialect][0]).exists():
                return dialect
        return None

    def find_config_files(self, dialect: Optional[ShellDialect] = None) -> Dict[str, Path]:
        """Find existing configuration files for shell"""
        if dialect is None:
            dialect = self.detect_current_shell()

        config_files = {}
        for pattern in self.CONFIG_FILES.get(dialect, []):
            config_path = self.home_dir / pattern
            if config_path.is_file():
                config_files[pattern] = config_path
        return config_files

    def get_config_file(self, dialect: Optional[ShellDialect] = None) -> Path:
        """Default startup file for a dialect under this home directory"""
        if dialect is None:
            dialect = self.detect_current_shell()
        return default_config_path(dialect, self.home_dir)
