"""
Transport used to forward command batches to remote agents.

The Forwarder interface is what the command batch protocol depends on. It
must return exactly one reply element per submitted command, in submission
order. HttpForwarder implements it over HTTP: the batch is POSTed to the
agent, which relays every command to the Kea control agent and returns the
responses as a JSON list.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import requests

from ..exceptions import TransportError
from ..utils import host_with_port_url
from .commands import KeaCommand

logger = logging.getLogger(__name__)


class Forwarder(ABC):
    """Abstract transport to the agents."""

    @abstractmethod
    def forward(self, agent_address: str, agent_port: int, ca_url: str,
                commands: List[KeaCommand]) -> List[Any]:
        """
        Forward commands to the control agent behind an agent.

        Args:
            agent_address: Address of the agent
            agent_port: Port of the agent
            ca_url: URL of the Kea control agent, as seen from the agent
            commands: Commands in submission order

        Returns:
            Raw reply, one element per command in submission order

        Raises:
            TransportError: If the agent cannot be reached
        """
        pass

    def close(self) -> None:
        """Release transport resources."""


class HttpForwarder(Forwarder):
    """
    Forwarder talking to agents over HTTP.

    Every call is bounded by ``timeout`` so that an unresponsive agent
    delays only the target it belongs to.
    """

    def __init__(self, timeout: float = 10.0, forward_path: str = "/forward",
                 session: Optional[requests.Session] = None):
        """
        Args:
            timeout: Per-call timeout in seconds
            forward_path: Path of the forwarding endpoint on the agent
            session: Session to use; a new one is created if omitted
        """
        self.timeout = timeout
        self.forward_path = forward_path
        self.session = session or self._create_session()

    @staticmethod
    def _create_session() -> requests.Session:
        session = requests.Session()
        session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        return session

    def forward(self, agent_address: str, agent_port: int, ca_url: str,
                commands: List[KeaCommand]) -> List[Any]:
        url = host_with_port_url(agent_address, agent_port).rstrip("/") + self.forward_path
        payload = {"url": ca_url, "commands": [command.to_dict() for command in commands]}

        start_time = time.time()
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise TransportError(
                f"Request to agent {agent_address}:{agent_port} timed out after {self.timeout}s",
                address=agent_address,
                port=agent_port,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(
                f"Cannot reach agent {agent_address}:{agent_port}: {e}",
                address=agent_address,
                port=agent_port,
            )

        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.debug(
            f"Forwarded {len(commands)} commands via {url}: "
            f"status={response.status_code}, time={elapsed_ms}ms"
        )

        if response.status_code != 200:
            raise TransportError(
                f"Agent {agent_address}:{agent_port} replied with HTTP {response.status_code}",
                address=agent_address,
                port=agent_port,
            )
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Agent {agent_address}:{agent_port} returned malformed JSON: {e}",
                address=agent_address,
                port=agent_port,
            )

    def close(self) -> None:
        self.session.close()
