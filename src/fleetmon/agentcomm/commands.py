"""
Command batch protocol for talking to Kea daemons through an agent.

Several commands, each addressed to a subset of the daemons behind one
control agent, are collected into a CommandBatch and submitted as a single
forwarded call. The reply is demultiplexed positionally: the i-th element
of the reply belongs to the i-th command, and within it the j-th response
belongs to the j-th daemon the command was addressed to.

A transport failure fails the whole batch. A daemon reporting a non-success
result only affects that command and is recorded on the BatchResult for the
caller to inspect.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Sequence

from ..exceptions import CommandError, ProtocolError
from ..validation import ValidationError

if TYPE_CHECKING:
    from .forwarder import Forwarder

logger = logging.getLogger(__name__)

RESULT_SUCCESS = 0
RESULT_ERROR = 1
RESULT_UNSUPPORTED = 2
RESULT_EMPTY = 3


@dataclass
class KeaCommand:
    """
    A single command addressed to one or more daemons.

    Attributes:
        command: Command name, e.g. ``stat-lease4-get``
        daemons: Names of the daemons the command is sent to
        arguments: Optional command arguments
    """

    command: str
    daemons: List[str]
    arguments: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"command": self.command, "service": list(self.daemons)}
        if self.arguments is not None:
            data["arguments"] = self.arguments
        return data


@dataclass
class ResultSet:
    """
    Tabular result returned by statistics commands.

    Attributes:
        columns: Column names
        rows: Rows of integer cells; a row may be malformed and is then
            skipped when the result set is read
    """

    columns: List[str]
    rows: List[List[Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ResultSet":
        """
        Decode the ``result-set`` element of a response.

        Raises:
            ProtocolError: If the element has no list of column names or
                no list of rows
        """
        if not isinstance(data, dict):
            raise ProtocolError(f"result-set must be an object, got {type(data).__name__}")

        columns = data.get("columns")
        rows = data.get("rows", [])
        if not isinstance(columns, list) or not all(isinstance(c, str) for c in columns):
            raise ProtocolError("result-set columns must be a list of names")
        if not isinstance(rows, list):
            raise ProtocolError("result-set rows must be a list")
        return cls(columns=list(columns), rows=list(rows))

    def _valid_rows(self) -> Iterator[List[int]]:
        for index, row in enumerate(self.rows):
            if not isinstance(row, list) or len(row) != len(self.columns):
                logger.warning(
                    f"Skipping result-set row {index}: expected {len(self.columns)} values, "
                    f"got {len(row) if isinstance(row, list) else type(row).__name__}"
                )
                continue
            if not all(isinstance(v, int) and not isinstance(v, bool) for v in row):
                logger.warning(f"Skipping result-set row {index}: non-integer value in {row}")
                continue
            yield row

    def records(self, required_columns: Sequence[str] = ()) -> Iterator[Dict[str, int]]:
        """
        Yield each well-formed row as a column name to value mapping.

        Rows whose value count differs from the column count, or which hold
        non-integer values, are skipped.

        Args:
            required_columns: Columns which must be declared

        Raises:
            ProtocolError: If a required column is not declared
        """
        missing = [c for c in required_columns if c not in self.columns]
        if missing:
            raise ProtocolError(f"result-set lacks required columns {missing}")
        for row in self._valid_rows():
            yield dict(zip(self.columns, row))


@dataclass
class KeaResponse:
    """
    Response of one daemon to one command.

    Attributes:
        result: Result code, 0 on success
        text: Message attached by the daemon
        arguments: Response arguments, if any
        daemon: Daemon which produced the response, when known
    """

    result: int
    text: str = ""
    arguments: Optional[Dict[str, Any]] = None
    daemon: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, daemon: Optional[str] = None) -> "KeaResponse":
        """
        Raises:
            ProtocolError: If the data is not a response object with an
                integer result
        """
        if not isinstance(data, dict):
            raise ProtocolError(f"response must be an object, got {type(data).__name__}")
        result = data.get("result")
        if not isinstance(result, int) or isinstance(result, bool):
            raise ProtocolError(f"response result must be an integer, got {result!r}")
        arguments = data.get("arguments")
        if arguments is not None and not isinstance(arguments, dict):
            raise ProtocolError("response arguments must be an object")
        return cls(
            result=result,
            text=str(data.get("text", "")),
            arguments=arguments,
            daemon=daemon,
        )

    @property
    def success(self) -> bool:
        return self.result == RESULT_SUCCESS

    @property
    def empty(self) -> bool:
        return self.result == RESULT_EMPTY

    def result_set(self) -> Optional[ResultSet]:
        """
        Return the decoded ``result-set`` argument, or None if there is none.

        Raises:
            ProtocolError: If the result set is malformed
        """
        if not self.arguments or "result-set" not in self.arguments:
            return None
        return ResultSet.from_dict(self.arguments["result-set"])


@dataclass
class BatchResult:
    """
    Responses of a submitted batch, one slot per command.

    Attributes:
        commands: Submitted commands, in submission order
        responses: Per-command lists of per-daemon responses
        errors: Command errors reported by daemons
    """

    commands: List[KeaCommand]
    responses: List[List[KeaResponse]]
    errors: List[CommandError] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.responses)

    def __getitem__(self, slot: int) -> List[KeaResponse]:
        return self.responses[slot]

    def successful(self, slot: int) -> List[KeaResponse]:
        """Responses of the given command which reported success."""
        return [r for r in self.responses[slot] if r.success]

    def errors_for(self, slot: int) -> List[CommandError]:
        command = self.commands[slot].command
        return [e for e in self.errors if e.command == command]

    @property
    def last_error(self) -> Optional[CommandError]:
        return self.errors[-1] if self.errors else None


class CommandBatch:
    """
    Ordered set of commands submitted to one control agent in a single call.

    Usage:
        batch = CommandBatch()
        v4 = batch.add("stat-lease4-get", ["dhcp4"])
        result = batch.submit(forwarder, "10.0.0.1", 8080, "http://localhost:8000/")
        responses = result[v4]
    """

    def __init__(self):
        self._commands: List[KeaCommand] = []

    def add(self, command: str, daemons: Sequence[str], arguments: Optional[Dict[str, Any]] = None) -> int:
        """
        Append a command to the batch.

        Args:
            command: Command name
            daemons: Daemons the command is addressed to
            arguments: Optional command arguments

        Returns:
            The slot holding this command's responses in the BatchResult

        Raises:
            ValidationError: If the command name or the daemon set is empty
        """
        if not command:
            raise ValidationError("command name must not be empty", field_name="command", value=command)
        if not daemons:
            raise ValidationError(
                f"command {command} must be addressed to at least one daemon",
                field_name="daemons",
                value=list(daemons),
            )
        self._commands.append(KeaCommand(command=command, daemons=list(daemons), arguments=arguments))
        return len(self._commands) - 1

    @property
    def commands(self) -> List[KeaCommand]:
        return list(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def submit(self, forwarder: "Forwarder", agent_address: str, agent_port: int, ca_url: str) -> BatchResult:
        """
        Forward all commands in one call and demultiplex the reply.

        Args:
            forwarder: Transport used to reach the agent
            agent_address: Address of the agent
            agent_port: Port of the agent
            ca_url: URL of the control agent behind the agent

        Returns:
            BatchResult with one slot per command

        Raises:
            ValidationError: If the batch is empty
            TransportError: If the agent could not be reached
            ProtocolError: If the reply does not match the submitted commands
        """
        if not self._commands:
            raise ValidationError("cannot submit an empty command batch", field_name="commands")

        commands = list(self._commands)
        reply = forwarder.forward(agent_address, agent_port, ca_url, commands)

        if not isinstance(reply, list):
            raise ProtocolError(f"reply from {agent_address}:{agent_port} is not a list")
        if len(reply) != len(commands):
            raise ProtocolError(
                f"reply from {agent_address}:{agent_port} holds {len(reply)} responses "
                f"for {len(commands)} commands"
            )

        result = BatchResult(commands=commands, responses=[])
        for command, entry in zip(commands, reply):
            responses = self._decode_entry(command, entry)
            for response in responses:
                if response.success or response.empty:
                    continue
                error = CommandError(command.command, response.daemon, response.result, response.text)
                logger.warning(f"{error} (agent {agent_address}:{agent_port})")
                result.errors.append(error)
            result.responses.append(responses)
        return result

    @staticmethod
    def _decode_entry(command: KeaCommand, entry: Any) -> List[KeaResponse]:
        # A lone object is a single response, e.g. an error from the control agent itself
        if isinstance(entry, dict):
            entry = [entry]
        if not isinstance(entry, list):
            raise ProtocolError(f"responses to {command.command} must be a list")

        # Daemons can only be attributed when there is one response per daemon
        attributable = len(entry) == len(command.daemons)
        return [
            KeaResponse.from_dict(item, daemon=command.daemons[index] if attributable else None)
            for index, item in enumerate(entry)
        ]
