"""Chat-bot plugin logic: reminders, group management, music practice, local images and web lookups."""

__version__ = "0.1.0"