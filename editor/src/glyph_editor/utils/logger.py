"""Global logging and error handling utilities"""
import logging
import sys

# Detect debug mode - True if running from source, False if packaged
DEBUG_MODE = not getattr(sys, 'frozen', False)

logger = logging.getLogger('glyph_editor')

_status_sink = None


def set_status_sink(sink):
    """Set the callable that receives user-facing status messages

    Args:
        sink: callable(str) such as a status bar label's setText, or None
    """
    global _status_sink
    _status_sink = sink


def report_status(message: str):
    """Send a user-facing message to the status sink (logged when none is set)"""
    if _status_sink is not None:
        _status_sink(message)
    else:
        logger.info("STATUS: %s", message)


def loggerRaise(e: Exception, user_message: str = None):
    """Handle exceptions with a status message in release mode

    Args:
        e: The exception to handle
        user_message: User-friendly message to report (optional)

    In DEBUG_MODE:
        - Just raises the exception (shows full traceback)

    In RELEASE_MODE:
        - Logs the full traceback
        - Reports the user message (or exception string) to the status sink
        - Then raises the exception
    """
    if DEBUG_MODE:
        raise e

    logger.error("%s", user_message or e, exc_info=e)
    report_status(user_message if user_message else str(e))
    raise e
