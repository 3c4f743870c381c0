"""
Pytest configuration and shared fixtures for the fleetmon test suite.

This module provides common fixtures, fakes for the agent transport and the
event center, and helpers to build Kea responses.
"""

import sys
import threading
from collections import deque
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fleetmon.agentcomm import Forwarder, KeaCommand
from fleetmon.config import clear_config_cache
from fleetmon.eventcenter import create_event
from fleetmon.exceptions import TransportError
from fleetmon.models import App, Daemon, Event, EventLevel, Machine
from fleetmon.storage import InMemoryStore


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Fakes
# ============================================================================


class FakeForwarder(Forwarder):
    """
    Forwarder returning canned replies and recording every call.

    ``replies`` maps an agent address to either a reply, a deque of replies
    consumed one per call, a callable building the reply from the call, or an
    exception instance to raise.
    """

    def __init__(self, replies: Optional[Dict[str, Any]] = None):
        self.replies: Dict[str, Any] = replies or {}
        self.calls: List[Tuple[str, int, str, List[KeaCommand]]] = []
        self.closed = False
        self._lock = threading.Lock()

    def forward(self, agent_address, agent_port, ca_url, commands):
        with self._lock:
            self.calls.append((agent_address, agent_port, ca_url, list(commands)))
            reply = self.replies.get(agent_address)
            if isinstance(reply, deque):
                reply = reply.popleft()

        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(agent_address, agent_port, ca_url, commands)
        if reply is None:
            raise TransportError(f"no reply configured for {agent_address}", address=agent_address)
        return reply

    def close(self):
        self.closed = True


class FakeEventCenter:
    """Event center collecting events synchronously, without a store."""

    def __init__(self):
        self.events: List[Event] = []

    def add_event(self, event: Event) -> None:
        self.events.append(event)

    def add_info_event(self, text: str, *objects: Any) -> None:
        self.events.append(create_event(EventLevel.INFO, text, *objects))

    def add_warning_event(self, text: str, *objects: Any) -> None:
        self.events.append(create_event(EventLevel.WARNING, text, *objects))

    def add_error_event(self, text: str, *objects: Any) -> None:
        self.events.append(create_event(EventLevel.ERROR, text, *objects))


# ============================================================================
# Helpers
# ============================================================================


def kea_response(result: int = 0, text: str = "", arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build a single Kea response object."""
    response: Dict[str, Any] = {"result": result, "text": text}
    if arguments is not None:
        response["arguments"] = arguments
    return response


def stats_response(columns: List[str], rows: List[List[Any]]) -> Dict[str, Any]:
    """Build a successful statistics response carrying a result set."""
    return kea_response(arguments={"result-set": {"columns": columns, "rows": rows}})


def add_kea_app(
    store: InMemoryStore,
    address: str = "10.0.0.1",
    daemons: Union[List[str], List[Daemon]] = ("dhcp4", "dhcp6"),
    hostname: str = "",
) -> App:
    """Register a machine with one Kea app and return the stored app."""
    machine = store.add_machine(Machine(id=0, address=address, agent_port=8080, hostname=hostname))
    daemon_objects = [d if isinstance(d, Daemon) else Daemon(id=0, name=d) for d in daemons]
    return store.add_app(App(id=0, type="kea", machine=machine, daemons=daemon_objects))


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def store():
    """An empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def fake_forwarder():
    """A forwarder without any configured replies."""
    return FakeForwarder()


@pytest.fixture
def fake_event_center():
    """An event center recording events in a list."""
    return FakeEventCenter()


@pytest.fixture
def sample_config_data():
    """Sample main configuration data for testing."""
    return {
        "server": {"log_level": "DEBUG"},
        "pullers": {"stats_interval": 30, "hosts_interval": 120, "hosts_page_limit": 50},
        "agents": {"forward_timeout": 5.0, "forward_path": "/forward"},
        "eventcenter": {"subscriber_queue_size": 10},
        "snapshot": {"enabled": False},
    }


@pytest.fixture
def sample_machines_data():
    """Sample inventory for testing."""
    return [
        {
            "address": "192.0.2.10",
            "agent_port": 8080,
            "hostname": "dhcp-a",
            "apps": [
                {"type": "kea", "ctrl_port": 8000, "daemons": ["dhcp4", "dhcp6"]},
            ],
        },
        {
            "address": "192.0.2.11",
            "apps": [{"type": "kea", "daemons": ["dhcp4"]}],
        },
    ]


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Clear the cached configuration after each test."""
    yield
    clear_config_cache()
