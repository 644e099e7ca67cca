"""Global state management for chix MCP."""

from chix_mcp.config import Config

# Global state (initialized on first access)
_config: Config | None = None


def get_config() -> Config:
    """Get or create config."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_state() -> None:
    """Reset global state for testing.

    Clears the config singleton so the next access re-reads the
    environment. Should only be used in test fixtures.
    """
    global _config
    _config = None


def set_config(config: Config) -> None:
    """Set the global config instance.

    Args:
        config: Config instance to use globally.
    """
    global _config
    _config = config
