"""
Unit tests for the lease statistics collector.
"""

from collections import deque
from unittest.mock import Mock

import pytest

from conftest import FakeForwarder, add_kea_app, kea_response, stats_response
from fleetmon.collectors import StatsCollector
from fleetmon.exceptions import CommandError, ProtocolError, TransportError
from fleetmon.models import Daemon, EventLevel

V4_COLUMNS = ["subnet-id", "total-addresses", "assigned-addresses", "declined-addresses"]
V6_COLUMNS = ["subnet-id", "total-nas", "assigned-nas", "declined-nas", "total-pds", "assigned-pds"]


def stats_reply(agent_address, agent_port, ca_url, commands):
    """Answer every stats command with one subnet."""
    reply = []
    for command in commands:
        if command.command == "stat-lease4-get":
            reply.append([stats_response(V4_COLUMNS, [[1, 256, 10, 0]])])
        else:
            reply.append([stats_response(V6_COLUMNS, [[1, 1000, 5, 0, 10, 1]])])
    return reply


@pytest.mark.unit
class TestStatsCollector:
    """Test cases for StatsCollector."""

    def test_collects_both_families(self, store, fake_event_center):
        """Test one batch per app with both commands, records stored."""
        app = add_kea_app(store)
        forwarder = FakeForwarder({"10.0.0.1": stats_reply})

        outcome = StatsCollector(store, forwarder, fake_event_center).collect()

        assert outcome.succeeded == 1 and outcome.ok
        assert len(forwarder.calls) == 1
        commands = forwarder.calls[0][3]
        assert [(c.command, c.daemons) for c in commands] == [
            ("stat-lease4-get", ["dhcp4"]),
            ("stat-lease6-get", ["dhcp6"]),
        ]
        stats = {r.family: r for r in store.get_lease_stats(app.id)}
        assert stats[4].subnet_id == 1
        assert stats[4].stats == {"total-addresses": 256, "assigned-addresses": 10, "declined-addresses": 0}
        assert stats[6].stats["assigned-pds"] == 1
        assert fake_event_center.events == []

    def test_only_active_daemons_addressed(self, store):
        """Test the batch only targets active daemons."""
        add_kea_app(store, daemons=[Daemon(id=0, name="dhcp4"), Daemon(id=0, name="dhcp6", active=False)])
        forwarder = FakeForwarder({"10.0.0.1": stats_reply})

        StatsCollector(store, forwarder).collect()

        assert [c.command for c in forwarder.calls[0][3]] == ["stat-lease4-get"]

    def test_skips_apps_without_active_dhcp_daemons(self, store):
        """Test targets without relevant active daemons are skipped, not failed."""
        add_kea_app(store, daemons=[Daemon(id=0, name="dhcp4", active=False)])
        add_kea_app(store, address="10.0.0.2", daemons=["ca", "d2"])
        forwarder = FakeForwarder()

        outcome = StatsCollector(store, forwarder).collect()

        assert forwarder.calls == []
        assert outcome.skipped == 2
        assert outcome.failed == 0
        assert outcome.ok

    def test_partial_failure_isolation(self, store, fake_event_center):
        """Test one unreachable app does not prevent collecting from the others."""
        good = add_kea_app(store, address="10.0.0.1")
        bad = add_kea_app(store, address="10.0.0.2")
        forwarder = FakeForwarder(
            {"10.0.0.1": stats_reply, "10.0.0.2": TransportError("connection refused")}
        )

        outcome = StatsCollector(store, forwarder, fake_event_center).collect()

        assert outcome.succeeded == 1
        assert outcome.failed == 1
        assert outcome.failed_targets == [bad.id]
        assert isinstance(outcome.last_error, TransportError)
        assert len(store.get_lease_stats(good.id)) == 2
        assert store.get_lease_stats(bad.id) == []

    def test_malformed_row_skipped(self, store):
        """Test a row with a mismatched value count is skipped and the others kept."""
        app = add_kea_app(store, daemons=["dhcp4"])
        reply = [[stats_response(V4_COLUMNS, [[1, 256, 10, 0], [2, 128, 3], [3, 64, 1, 0]])]]
        forwarder = FakeForwarder({"10.0.0.1": reply})

        outcome = StatsCollector(store, forwarder).collect()

        assert outcome.ok
        assert [r.subnet_id for r in store.get_lease_stats(app.id)] == [1, 3]

    def test_missing_subnet_id_column(self, store):
        """Test a result set without the key column fails the target."""
        add_kea_app(store, daemons=["dhcp4"])
        reply = [[stats_response(["total-addresses"], [[256]])]]
        forwarder = FakeForwarder({"10.0.0.1": reply})

        outcome = StatsCollector(store, forwarder).collect()

        assert outcome.failed == 1
        assert isinstance(outcome.last_error, ProtocolError)

    def test_one_command_error_is_not_a_target_failure(self, store):
        """Test a failing command does not discard the other command's data."""
        app = add_kea_app(store)
        reply = [
            [kea_response(1, "statistics unavailable")],
            [stats_response(V6_COLUMNS, [[1, 1000, 5, 0, 10, 1]])],
        ]
        forwarder = FakeForwarder({"10.0.0.1": reply})

        outcome = StatsCollector(store, forwarder).collect()

        assert outcome.succeeded == 1
        assert [r.family for r in store.get_lease_stats(app.id)] == [6]

    def test_all_commands_failing_fails_target(self, store):
        """Test an app whose every command failed counts as failed."""
        add_kea_app(store)
        reply = [[kea_response(2, "unsupported")], [kea_response(1, "error")]]
        forwarder = FakeForwarder({"10.0.0.1": reply})

        outcome = StatsCollector(store, forwarder).collect()

        assert outcome.failed == 1
        assert isinstance(outcome.last_error, CommandError)

    def test_empty_result_counts_as_success(self, store):
        """Test a daemon without subnets."""
        app = add_kea_app(store, daemons=["dhcp4"])
        forwarder = FakeForwarder({"10.0.0.1": [[kea_response(3, "no subnets")]]})

        outcome = StatsCollector(store, forwarder).collect()

        assert outcome.succeeded == 1
        assert store.get_lease_stats(app.id) == []

    def test_reachability_events(self, store, fake_event_center):
        """Test a warning on the first failure and an info event on recovery."""
        app = add_kea_app(store, hostname="dhcp-a")
        forwarder = FakeForwarder(
            {
                "10.0.0.1": deque(
                    [
                        TransportError("timed out"),
                        TransportError("timed out"),
                        stats_reply,
                    ]
                )
            }
        )
        collector = StatsCollector(store, forwarder, fake_event_center)

        collector.collect()
        collector.collect()
        assert len(fake_event_center.events) == 1
        warning = fake_event_center.events[0]
        assert warning.level == EventLevel.WARNING
        assert warning.text.startswith(f'Cannot pull lease stats from <app id="{app.id}" type="kea"')
        assert 'address="10.0.0.1" hostname="dhcp-a"' in warning.text
        assert warning.relations.app == app.id
        assert warning.relations.machine == app.machine.id

        collector.collect()
        assert len(fake_event_center.events) == 2
        recovery = fake_event_center.events[1]
        assert recovery.level == EventLevel.INFO
        assert "resumed" in recovery.text

    def test_store_error_is_reported_in_outcome(self, store):
        """Test a failing store does not raise out of the cycle."""
        forwarder = FakeForwarder()
        store.get_apps_by_type = Mock(side_effect=RuntimeError("db down"))

        outcome = StatsCollector(store, forwarder).collect()

        assert not outcome.ok
        assert forwarder.calls == []
