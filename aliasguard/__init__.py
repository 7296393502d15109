"""aliasguard - shell alias manager with automatic tiered backups"""

__version__ = "0.3.0"
