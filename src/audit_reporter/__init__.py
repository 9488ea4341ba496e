
from .app.main import publish_report, preview_report

__all__ = [
    "publish_report",
    "preview_report",
]

# stdlib logging defaults: attach NullHandler to prevent 'No handler' warnings
import logging
_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())
