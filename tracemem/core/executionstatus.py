from sys import stdout
from typing import TextIO


class ExecutionStatus:
    """
    Status of an execution as seen by the memory: READY, or KILLED
    when the provenance of the memory can no longer be trusted.
    A killed status carries the error that killed the execution.
    """

    READY = 1  # ready for execution
    KILLED = 2  # internal problem, the results of the execution are void

    __slots__ = "_status", "_detail"

    def __init__(self, st: int = READY, detail=None) -> None:
        assert st in (ExecutionStatus.READY, ExecutionStatus.KILLED), st
        self._status = st
        self._detail = detail

    def copy(self) -> "ExecutionStatus":
        # details are immutable values
        return ExecutionStatus(self._status, self._detail)

    def __eq__(self, rhs: object) -> bool:
        return (
            isinstance(rhs, ExecutionStatus)
            and self._status == rhs._status
            and self._detail == rhs._detail
        )

    def __hash__(self) -> int:
        return hash(self._detail) ^ hash(self._status)

    def status(self) -> int:
        return self._status

    def detail(self):
        return self._detail

    def set_killed(self, e) -> None:
        self._detail = e
        self._status = ExecutionStatus.KILLED

    def is_ready(self) -> bool:
        return self._status == ExecutionStatus.READY

    def is_killed(self) -> bool:
        return self._status == ExecutionStatus.KILLED

    def __repr__(self) -> str:
        return "READY" if self.is_ready() else "KILLED"

    def dump(self, stream: TextIO = stdout) -> None:
        stream.write(f"status: {self}\n")
        if self._detail is not None:
            stream.write(f"detail: {self._detail}\n")
