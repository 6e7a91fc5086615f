"""
logging_config.py — Process-wide logging setup.

Called once at startup by the API (and by the tools/ scripts). Everything
else just does `logging.getLogger(__name__)`.
"""

import logging
import sys

FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False

def setup_logging(debug: bool = False) -> None:
    # Attach a stdout handler to the root logger; safe to call twice.
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(FORMAT))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    if not debug:
        # urllib3 logs every connection at DEBUG/INFO
        logging.getLogger("urllib3").setLevel(logging.WARNING)
    _configured = True
