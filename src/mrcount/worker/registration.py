"""
Worker self-registration with the coordinator.
"""

import logging
import threading

import requests

from mrcount import config

logger = logging.getLogger(__name__)


class CoordinatorRegistration:
    """Registers a worker in the background, retrying until the coordinator answers."""

    def __init__(self, kind: str, address: str, coordinator_url: str = config.COORDINATOR_URL,
                 retry_interval: float = config.REGISTER_RETRY_INTERVAL, timeout: float = 5.0):
        self.kind = kind
        self.address = address
        self.coordinator_url = coordinator_url.rstrip('/')
        self.retry_interval = retry_interval
        self.timeout = timeout
        self.worker_id = None
        self.session = requests.Session()
        self.registered = threading.Event()
        self._stop = threading.Event()
        self._thread = None

    def _payload(self):
        return {'type': self.kind, 'address': self.address}

    def register_once(self) -> bool:
        """Attempt a single registration. Returns True on success."""
        try:
            response = self.session.post(f"{self.coordinator_url}/register",
                                         json=self._payload(), timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Failed to register {self.kind} {self.address} "
                           f"with {self.coordinator_url}: {e}")
            return False

        self.worker_id = body.get('workerId')
        logger.info(f"Registered {self.kind} {self.address} as #{self.worker_id} "
                    f"(mappers={body.get('totalMappers')}, reducers={body.get('totalReducers')})")
        self.registered.set()
        return True

    def _register_loop(self):
        while not self._stop.is_set():
            if self.register_once():
                return
            logger.info(f"Retrying registration in {self.retry_interval}s")
            self._stop.wait(self.retry_interval)

    def start(self):
        """Start registering in a daemon thread."""
        self._stop.clear()
        self._thread = threading.Thread(target=self._register_loop, daemon=True)
        self._thread.start()

    def stop(self):
        """Stop retrying."""
        self._stop.set()
        if self._thread:
            self._thread.join()

    def unregister(self) -> bool:
        """Best-effort unregistration on shutdown."""
        try:
            response = self.session.post(f"{self.coordinator_url}/unregister",
                                         json=self._payload(), timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to unregister {self.kind} {self.address}: {e}")
            return False

        self.registered.clear()
        logger.info(f"Unregistered {self.kind} {self.address} from coordinator")
        return True
