"""
Network reachability check.
"""
import asyncio
from typing import List, Optional, Tuple
from loguru import logger

from catalog.config import REACHABILITY_HOSTS, REACHABILITY_TIMEOUT


class ReachabilityClient:
    """
    Answers "is the device connected?" by opening a TCP connection to well-known hosts.
    Polled on demand; there is no background monitoring.
    """

    def __init__(
        self,
        hosts: Optional[List[Tuple[str, int]]] = None,
        timeout: float = REACHABILITY_TIMEOUT,
    ):
        self.hosts = hosts if hosts is not None else list(REACHABILITY_HOSTS)
        self.timeout = timeout

    async def _try_connect(self, host: str, port: int) -> bool:
        try:
            _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=self.timeout)
        except (OSError, asyncio.TimeoutError) as e:
            logger.debug(f"📡 {host}:{port} unreachable: {e}")
            return False
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"📡 Error closing connection to {host}:{port}: {e}")
        return True

    async def is_connected(self) -> bool:
        """
        Returns:
            bool: True as soon as one host accepts a connection.
        """
        for host, port in self.hosts:
            if await self._try_connect(host, port):
                return True
        return False
