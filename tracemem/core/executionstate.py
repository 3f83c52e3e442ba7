from sys import stdout
from typing import Optional, TextIO

from tracemem.core.executionstatus import ExecutionStatus
from tracemem.core.memory import Memory


class ExecutionState:
    """
    Memory of one execution together with its status. States that
    explore different branches must be obtained by `copy()` so that
    they never share (observable) memory.
    """

    __slots__ = "memory", "_status"

    def __init__(self, m: Optional[Memory] = None) -> None:
        # linear memory with byte tracking
        self.memory = Memory() if m is None else m
        # ready or killed
        self._status = ExecutionStatus()

    def __eq__(self, rhs: object) -> bool:
        if self is rhs:
            return True
        assert isinstance(rhs, ExecutionState)
        return self._status == rhs._status and self.memory == rhs.memory

    def _copy_to(self, rhs: "ExecutionState") -> None:
        assert isinstance(rhs, ExecutionState)
        rhs.memory = self.memory.copy()
        rhs._status = self._status.copy()

    def copy(self) -> "ExecutionState":
        # use type(self) so that this method works also for
        # child classes (if not overridden)
        new = type(self)()
        self._copy_to(new)
        return new

    def status(self) -> ExecutionStatus:
        return self._status

    def status_detail(self):
        return self._status.detail()

    def is_ready(self) -> bool:
        return self._status.is_ready()

    def is_killed(self) -> bool:
        return self._status.is_killed()

    def set_killed(self, e) -> None:
        self._status.set_killed(e)

    def dump(self, stream: TextIO = stdout) -> None:
        stream.write("---- State ----\n")
        self._status.dump(stream)
        self.memory.dump(stream)
