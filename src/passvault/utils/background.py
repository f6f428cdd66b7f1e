"""
Run slow vault operations off the caller's thread.

Key derivation is deliberately expensive, so a front-end submits
load/save here and collects the result from the returned Future.
Submitted work always runs to completion.
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from passvault.config.config_vault import BACKGROUND_WORKERS
from passvault.utils import vault_utils

logger = logging.getLogger(__name__)

_executor: ThreadPoolExecutor | None = None
_executor_guard = threading.Lock()


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_guard:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=BACKGROUND_WORKERS,
                thread_name_prefix="passvault",
            )
        return _executor


def run_in_background(fn, *args, **kwargs) -> Future:
    """Submit fn to the shared worker pool."""
    return _get_executor().submit(fn, *args, **kwargs)


def load_vault_async(path, password: str) -> Future:
    return run_in_background(vault_utils.load_vault, path, password)


def save_vault_async(path, password: str, vault, params=None) -> Future:
    return run_in_background(vault_utils.save_vault, path, password, vault, params)


def change_master_password_async(path, old_password: str, new_password: str) -> Future:
    return run_in_background(
        vault_utils.change_master_password, path, old_password, new_password
    )


def shutdown(wait: bool = True) -> None:
    """Stop the worker pool. Pending work finishes when wait is True."""
    global _executor
    with _executor_guard:
        if _executor is not None:
            _executor.shutdown(wait=wait)
            _executor = None
            logger.debug("Background executor stopped")
