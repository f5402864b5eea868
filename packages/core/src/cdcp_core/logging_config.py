"""Optional structlog setup driven by ``CdcpConfig.log_level``.

Modules log through ``structlog.get_logger()`` and work with structlog's
defaults. Host applications that want level filtering call this once at
startup.
"""

import logging

import structlog

from cdcp_core.config import CdcpConfig


def configure_logging(config: CdcpConfig) -> None:
    """Filter structlog output below the configured level.

    Safe to call more than once; the last call wins.
    """
    level = getattr(logging, config.log_level)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
