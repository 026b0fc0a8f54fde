"""cutrel: staged release orchestration with local rollback."""

__version__ = "0.4.0"
