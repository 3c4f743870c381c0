"""
Host reservations collector.

Pages through ``reservation-get-page`` on every active DHCP daemon of a Kea
application. Each page asks for at most ``page_limit`` hosts; the cursor for
the next page (``from`` and ``source-index``) is taken from the ``next``
argument of the previous response. Paging stops at a page shorter than the
limit or at an empty result.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..agentcomm import CommandBatch, Forwarder
from ..exceptions import ProtocolError
from ..models.inventory import DHCP4_DAEMON, App
from ..models.records import HostRecord
from ..storage import MonitorStore
from ..utils import format_mac_address, make_cidr, parse_ip
from ..validation import validate_positive_integer
from .base import AbstractCollector

logger = logging.getLogger(__name__)

RESERVATION_GET_PAGE = "reservation-get-page"
DEFAULT_PAGE_LIMIT = 1000


def _normalize_address(value: Any, want_prefix: bool) -> Optional[str]:
    if not isinstance(value, str):
        return None
    try:
        cidr = make_cidr(value)
    except ValueError:
        return None
    normalized, is_prefix, valid = parse_ip(cidr)
    if not valid or is_prefix != want_prefix:
        return None
    return normalized


def normalize_host(app_id: int, family: int, entry: Any) -> Optional[HostRecord]:
    """
    Turn a host entry returned by Kea into a HostRecord.

    Args:
        app_id: Application the entry was pulled from
        family: 4 or 6
        entry: Host object from the ``hosts`` argument

    Returns:
        The record, or None if the entry is malformed
    """
    if not isinstance(entry, dict):
        return None
    subnet_id = entry.get("subnet-id", 0)
    if not isinstance(subnet_id, int) or isinstance(subnet_id, bool):
        return None

    hw_address = None
    if entry.get("hw-address"):
        hw_address = format_mac_address(str(entry["hw-address"]))
        if hw_address is None:
            return None
    duid = entry.get("duid") or None
    client_id = entry.get("client-id") or None
    hostname = entry.get("hostname") or ""
    if not (hw_address or duid or client_id or hostname):
        return None

    ip_addresses: List[str] = []
    raw_addresses = entry.get("ip-addresses", [])
    if family == 4 and entry.get("ip-address") not in (None, "", "0.0.0.0"):
        raw_addresses = [entry["ip-address"]]
    if not isinstance(raw_addresses, list):
        return None
    for raw in raw_addresses:
        address = _normalize_address(raw, want_prefix=False)
        if address is None:
            return None
        ip_addresses.append(address)

    prefixes: List[str] = []
    raw_prefixes = entry.get("prefixes", [])
    if not isinstance(raw_prefixes, list):
        return None
    for raw in raw_prefixes:
        prefix = _normalize_address(raw, want_prefix=True)
        if prefix is None:
            return None
        prefixes.append(prefix)

    return HostRecord(
        app_id=app_id,
        family=family,
        subnet_id=subnet_id,
        hw_address=hw_address,
        duid=duid,
        client_id=client_id,
        hostname=hostname,
        ip_addresses=ip_addresses,
        prefixes=prefixes,
    )


class HostsCollector(AbstractCollector):
    """Collects host reservations from Kea DHCP daemons."""

    description = "host reservations"

    def __init__(
        self,
        store: MonitorStore,
        forwarder: Forwarder,
        event_center: Optional[Any] = None,
        page_limit: int = DEFAULT_PAGE_LIMIT,
    ):
        super().__init__(store, forwarder, event_center)
        self.page_limit = validate_positive_integer(page_limit, field_name="page_limit")

    def collect_from_app(self, app: App, daemons: List[str]) -> None:
        records: List[HostRecord] = []
        errors: List[Exception] = []
        pulled = False
        for daemon in daemons:
            family = 4 if daemon == DHCP4_DAEMON else 6
            try:
                records.extend(self.pull_daemon_hosts(app, daemon, family))
                pulled = True
            except ProtocolError:
                raise
            except Exception as e:
                # Other daemons of the same app may still answer
                logger.warning(f"Cannot pull hosts from {daemon} of app {app.id}: {e}")
                errors.append(e)

        if not pulled and errors:
            raise errors[-1]

        self.store.upsert_hosts(app.id, records)
        logger.debug(f"Stored {len(records)} host reservations from app {app.id}")

    def pull_daemon_hosts(self, app: App, daemon: str, family: int) -> List[HostRecord]:
        """
        Page through all host reservations of one daemon.

        Raises:
            CommandError: If the daemon rejects the command
            ProtocolError: If a page is malformed
            TransportError: If the agent cannot be reached
        """
        hosts: List[HostRecord] = []
        cursor: Optional[Tuple[Any, Any]] = None
        skipped = 0
        while True:
            arguments: Dict[str, Any] = {"limit": self.page_limit}
            if cursor is not None:
                arguments["from"], arguments["source-index"] = cursor

            batch = CommandBatch()
            slot = batch.add(RESERVATION_GET_PAGE, [daemon], arguments)
            result = self.submit(app, batch)

            responses = result[slot]
            if not responses:
                raise ProtocolError(f"no response to {RESERVATION_GET_PAGE} from {daemon}")
            response = responses[0]
            if response.empty:
                break
            if not response.success:
                raise result.errors_for(slot)[-1]

            page = (response.arguments or {}).get("hosts", [])
            if not isinstance(page, list):
                raise ProtocolError(f"hosts returned by {daemon} must be a list")
            for entry in page:
                record = normalize_host(app.id, family, entry)
                if record is None:
                    skipped += 1
                    continue
                hosts.append(record)

            next_page = (response.arguments or {}).get("next")
            if len(page) < self.page_limit or not isinstance(next_page, dict):
                break
            next_cursor = (next_page.get("from"), next_page.get("source-index"))
            if next_cursor == cursor:
                logger.warning(f"{daemon} of app {app.id} returned the same page cursor twice, stopping")
                break
            cursor = next_cursor

        if skipped:
            logger.warning(f"Skipped {skipped} malformed host entries from {daemon} of app {app.id}")
        return hosts
