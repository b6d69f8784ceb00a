"""
LedgerPOS - Connectivity State
===============================
Online/offline flag stamped on new records as `synced`.
Informational only: never blocks or alters settlement math.
"""

import logging
import threading

from config.settings import ASSUME_ONLINE

logger = logging.getLogger("ledgerpos.connectivity")


class Connectivity:

    def __init__(self, online: bool = True):
        self._online = online
        self._lock = threading.Lock()

    def is_online(self) -> bool:
        with self._lock:
            return self._online

    def set_online(self, online: bool) -> None:
        with self._lock:
            if self._online != online:
                logger.info(f"Connectivity changed: {'online' if online else 'offline'}")
            self._online = online


# Singleton
connectivity = Connectivity(online=ASSUME_ONLINE)
