class ByteTrackerError(RuntimeError):
    """
    The byte tracker lost track of its own ranges: a range that was
    reported to exist could not be found, or two tracked ranges overlap.
    This is never recoverable for the current execution.
    """


class Error:
    """
    Generic error type that describes why an execution stopped
    (e.g., the provenance of memory became inconsistent).
    """

    __slots__ = "_type", "_descr"

    UNKNOWN = 0
    MEM_ERROR = 1

    def __init__(self, t, d=None):
        self._type = t
        self._descr = d

    def type(self):
        return self._type

    def descr(self):
        return self._descr

    def is_memory_error(self):
        return self._type == Error.MEM_ERROR

    def __eq__(self, rhs):
        return (
            isinstance(rhs, Error)
            and self._type == rhs._type
            and self._descr == rhs._descr
        )

    def __hash__(self):
        return hash(self._type) ^ hash(self._descr)

    def __repr__(self):
        ty = self._type
        if ty == Error.UNKNOWN:
            detail = "unknown error"
        elif ty == Error.MEM_ERROR:
            detail = "memory error"
        else:
            raise RuntimeError("Invalid error type")
        return detail

    def __str__(self):
        if self._descr:
            return f"{self.__repr__()}: {self._descr}"
        return self.__repr__()


class MemError(Error):
    """
    Memory errors. Reads and writes of the linear memory never fail
    (offsets are clamped and reads are zero-filled), so the only kind
    that can stop an execution is a broken byte tracker.
    """

    __slots__ = "_memerr"

    INCONSISTENT_TRACKER = 1

    def __init__(self, t, descr=None):
        super().__init__(Error.MEM_ERROR, descr)
        self._memerr = t

    def is_inconsistent_tracker(self):
        return self._memerr == MemError.INCONSISTENT_TRACKER

    def __eq__(self, rhs):
        return (
            isinstance(rhs, MemError)
            and self._memerr == rhs._memerr
            and self._descr == rhs._descr
        )

    def __hash__(self):
        return hash(self._memerr) ^ hash(self._descr)

    def __repr__(self):
        err = self._memerr
        assert self.is_memory_error()
        if err == MemError.INCONSISTENT_TRACKER:
            detail = "inconsistent byte tracker"
        else:
            raise RuntimeError("Invalid memory error type")

        return f"memory error - {detail}"

    def __str__(self):
        return f"{self.__repr__()} ({self.descr()})"
