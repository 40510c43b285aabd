from __future__ import annotations

import logging
import sys

def get_logger(name: str = "static_builder") -> logging.Logger:
    log = logging.getLogger(name)
    if log.handlers:
        return log
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    log.addHandler(h)
    log.setLevel(logging.INFO)
    return log

def set_verbose(verbose: bool, name: str = "static_builder") -> None:
    get_logger(name).setLevel(logging.DEBUG if verbose else logging.INFO)
