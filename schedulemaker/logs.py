"""
Logging setup.

All modules log through logging.getLogger(__name__); this module wires the
root logger to a rich console handler once, at CLI start-up.

Levels:
- default: INFO (progress messages)
- --silent: WARNING and above only
- --debug: everything, including the per-node search trace
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

# warnings and errors go to stderr so schedules on stdout stay clean
err_console = Console(stderr=True)


def setup_logging(debug: bool = False, silent: bool = False) -> None:
    if debug:
        level = logging.DEBUG
    elif silent:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=debug, markup=False)],
        force=True,
    )

    if debug and silent:
        logging.getLogger(__name__).warning("Debug flag overrides silent flag")
    logging.getLogger(__name__).debug("Debug mode is ON")
