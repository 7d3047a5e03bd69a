"""diaglog's own logger.

All modules import from here:
    from diaglog.log import logger

Records propagate to the root logger, so once initialize() has installed
the handler they end up in the same log file as the application's.
Never use this logger from the sink writer.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("diaglog")
logger.addHandler(logging.NullHandler())
