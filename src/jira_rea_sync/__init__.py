"""Transfer Jira work logs into the Rea time-sheet portal."""

__version__ = "0.1.0"
