"""Core building blocks: logging, configuration, environment and errors."""
