"""
stacklang Command-Line Interface
================================

This package provides command-line tools for stacklang:

- **slc**: compiler (source → assembly)
- **slbuild**: build tool (source → assembly → object → executable → run)

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

import logging

__all__ = ["slc", "slbuild", "setup_logging"]


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )
