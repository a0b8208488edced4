# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""Global logger instance for the Skein CLI framework."""
import logging

logger: logging.Logger = logging.getLogger("skein")
