"""Config subpackage - settings and logging."""
from .settings import Settings, get_settings
from .logging import configure_logging, get_logger, quote_context

__all__ = ['Settings', 'get_settings', 'configure_logging', 'get_logger', 'quote_context']
