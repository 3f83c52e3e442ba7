from typing import Any, List, Optional, Union

from tracemem.core.errors import ByteTrackerError, MemError
from tracemem.core.executionstate import ExecutionState
from tracemem.core.memory import Memory
from tracemem.core.options import MemoryOptions
from tracemem.util.debugging import dbg, dbgv, warn


class MemoryModel:
    """
    Class that takes care of performing memory operations of an interpreter
    on execution states (without knowing what is the real memory implementation).
    """

    def __init__(self, opts: Optional[MemoryOptions] = None) -> None:
        self._opts = opts or MemoryOptions()
        dbg(f"Memory model with {self._opts}")

    def options(self) -> MemoryOptions:
        return self._opts

    def create_memory(self) -> Memory:
        """
        Create a memory object that is going to be a part
        of a state.
        """
        return Memory(self._opts.ceiling)

    def create_state(self) -> ExecutionState:
        return ExecutionState(self.create_memory())

    def _kill(self, state: ExecutionState, e: ByteTrackerError) -> None:
        err = MemError(MemError.INCONSISTENT_TRACKER, str(e))
        warn(f"Killing state: {err}")
        state.set_killed(err)

    def write(
        self,
        state: ExecutionState,
        offset: int,
        size: int,
        value: Union[bytes, bytearray, list],
        token: Any = None,
    ) -> List[ExecutionState]:
        """
        Store `value` to memory of the state. The write is tracked
        if tracking is enabled and we got the token of the writing instruction.
        """
        assert state.is_ready(), f"Writing memory of a finished state: {state.status()}"
        memory = state.memory
        if token is None or not self._opts.track_bytes:
            memory.store(offset, size, value)
            return [state]

        dbgv(f"tracked store of {size}B at {offset}")
        try:
            memory.store_with_opcode(offset, size, value, token)
            if self._opts.verify_tracker:
                memory.tracker().verify()
        except ByteTrackerError as e:
            self._kill(state, e)
        return [state]

    def read(self, state: ExecutionState, offset: int, size: int) -> bytes:
        return state.memory.read(offset, size)

    def origin(self, state: ExecutionState, offset: int) -> Optional[Any]:
        """
        Get the token of the write that modified the byte at `offset` last.
        Return None if the byte was not written or if the state got killed
        because the byte tracker became inconsistent.
        """
        try:
            return state.memory.origin(offset)
        except ByteTrackerError as e:
            self._kill(state, e)
        return None
