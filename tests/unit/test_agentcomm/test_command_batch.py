"""
Unit tests for the command batch protocol.

Covers building batches, positional correlation of responses, per-command
errors and malformed replies.
"""

import pytest

from conftest import FakeForwarder, kea_response, stats_response
from fleetmon.agentcomm import CommandBatch, KeaResponse, ResultSet
from fleetmon.exceptions import CommandError, ProtocolError, TransportError
from fleetmon.validation import ValidationError

CA_URL = "http://localhost:8000/"


def submit(batch, reply):
    forwarder = FakeForwarder({"10.0.0.1": reply})
    return batch.submit(forwarder, "10.0.0.1", 8080, CA_URL), forwarder


@pytest.mark.unit
class TestCommandBatchBuilding:
    """Test cases for adding commands."""

    def test_add_returns_slots(self):
        """Test slots follow submission order."""
        batch = CommandBatch()
        assert batch.add("stat-lease4-get", ["dhcp4"]) == 0
        assert batch.add("stat-lease6-get", ["dhcp6"]) == 1
        assert len(batch) == 2
        assert [c.command for c in batch.commands] == ["stat-lease4-get", "stat-lease6-get"]

    def test_command_wire_format(self):
        """Test a command is serialized with its service list."""
        batch = CommandBatch()
        batch.add("reservation-get-page", ["dhcp4"], {"limit": 10})
        assert batch.commands[0].to_dict() == {
            "command": "reservation-get-page",
            "service": ["dhcp4"],
            "arguments": {"limit": 10},
        }

    def test_empty_daemon_set_rejected(self):
        """Test a command must address at least one daemon."""
        with pytest.raises(ValidationError):
            CommandBatch().add("stat-lease4-get", [])

    def test_empty_command_rejected(self):
        """Test a command must have a name."""
        with pytest.raises(ValidationError):
            CommandBatch().add("", ["dhcp4"])

    def test_empty_batch_rejected(self):
        """Test an empty batch cannot be submitted."""
        forwarder = FakeForwarder()
        with pytest.raises(ValidationError):
            CommandBatch().submit(forwarder, "10.0.0.1", 8080, CA_URL)
        assert forwarder.calls == []


@pytest.mark.unit
class TestCommandBatchSubmit:
    """Test cases for submitting batches and decoding replies."""

    def test_positional_correlation(self):
        """Test the k-th reply element belongs to the k-th command."""
        batch = CommandBatch()
        v4 = batch.add("stat-lease4-get", ["dhcp4"])
        v6 = batch.add("stat-lease6-get", ["dhcp6"])

        result, forwarder = submit(
            batch,
            [
                [stats_response(["subnet-id"], [[4]])],
                [stats_response(["subnet-id"], [[6]])],
            ],
        )

        assert len(result) == 2
        assert result[v4][0].daemon == "dhcp4"
        assert result[v4][0].result_set().rows == [[4]]
        assert result[v6][0].daemon == "dhcp6"
        assert result[v6][0].result_set().rows == [[6]]
        assert forwarder.calls[0][2] == CA_URL

    def test_command_error_is_per_command(self):
        """Test a non-zero result is recorded without failing the batch."""
        batch = CommandBatch()
        v4 = batch.add("stat-lease4-get", ["dhcp4"])
        v6 = batch.add("stat-lease6-get", ["dhcp6"])

        result, _ = submit(
            batch,
            [
                [kea_response(1, "unknown command")],
                [stats_response(["subnet-id"], [[1]])],
            ],
        )

        assert result.successful(v4) == []
        assert len(result.successful(v6)) == 1
        assert len(result.errors) == 1
        error = result.errors_for(v4)[0]
        assert isinstance(error, CommandError)
        assert error.daemon == "dhcp4"
        assert error.result == 1
        assert result.last_error is error

    def test_empty_result_is_not_an_error(self):
        """Test result 3 is not reported as a command error."""
        batch = CommandBatch()
        slot = batch.add("stat-lease4-get", ["dhcp4"])

        result, _ = submit(batch, [[kea_response(3, "no subnets")]])

        assert result[slot][0].empty
        assert result.errors == []

    def test_lone_response_object(self):
        """Test a single object instead of a list is accepted."""
        batch = CommandBatch()
        slot = batch.add("stat-lease4-get", ["dhcp4"])

        result, _ = submit(batch, [kea_response(1, "daemon not configured")])

        assert len(result[slot]) == 1
        assert result[slot][0].daemon == "dhcp4"

    def test_unattributable_responses(self):
        """Test daemons are not guessed when counts differ."""
        batch = CommandBatch()
        slot = batch.add("config-get", ["dhcp4", "dhcp6"])

        result, _ = submit(batch, [[kea_response(0)]])

        assert result[slot][0].daemon is None

    def test_count_mismatch(self):
        """Test a reply with the wrong number of elements."""
        batch = CommandBatch()
        batch.add("stat-lease4-get", ["dhcp4"])
        batch.add("stat-lease6-get", ["dhcp6"])

        with pytest.raises(ProtocolError):
            submit(batch, [[kea_response(0)]])

    @pytest.mark.parametrize("reply", [{"result": 0}, [["not a response"]], [[{"text": "no result"}]]])
    def test_malformed_reply(self, reply):
        """Test replies that are not well-formed response lists."""
        batch = CommandBatch()
        batch.add("stat-lease4-get", ["dhcp4"])

        with pytest.raises(ProtocolError):
            submit(batch, reply)

    def test_transport_error_propagates(self):
        """Test a transport failure fails the whole batch."""
        batch = CommandBatch()
        batch.add("stat-lease4-get", ["dhcp4"])

        with pytest.raises(TransportError):
            submit(batch, TransportError("connection refused"))


@pytest.mark.unit
class TestResultSet:
    """Test cases for result set decoding."""

    def test_records_skip_malformed_rows(self):
        """Test rows with a mismatched value count are skipped."""
        result_set = ResultSet.from_dict(
            {
                "columns": ["subnet-id", "total-addresses", "assigned-addresses"],
                "rows": [[1, 256, 10], [2, 128], [3, 64, "x"], [4, 32, 0]],
            }
        )

        records = list(result_set.records(required_columns=("subnet-id",)))

        assert records == [
            {"subnet-id": 1, "total-addresses": 256, "assigned-addresses": 10},
            {"subnet-id": 4, "total-addresses": 32, "assigned-addresses": 0},
        ]

    def test_missing_required_column(self):
        """Test a result set lacking the key column."""
        result_set = ResultSet.from_dict({"columns": ["total-addresses"], "rows": [[1]]})
        with pytest.raises(ProtocolError):
            list(result_set.records(required_columns=("subnet-id",)))

    def test_malformed_result_set(self):
        """Test result sets without column names."""
        with pytest.raises(ProtocolError):
            ResultSet.from_dict({"rows": []})

    def test_response_without_result_set(self):
        """Test a response without result set."""
        assert KeaResponse(result=0, arguments={}).result_set() is None
