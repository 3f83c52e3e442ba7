from tracemem.core.memory import MEMORY_CEILING


class MemoryOptions:
    def __init__(self, opts: "MemoryOptions" = None) -> None:
        if opts:
            self.ceiling = opts.ceiling
            self.track_bytes = opts.track_bytes
            self.verify_tracker = opts.verify_tracker
        else:
            # offsets and sizes of memory accesses are capped to this value
            self.ceiling = MEMORY_CEILING
            # remember which write modified each byte
            self.track_bytes = True
            # check the byte tracker after every tracked write (slow)
            self.verify_tracker = False

    def set_untracked(self) -> "MemoryOptions":
        self.track_bytes = False
        return self

    def __str__(self) -> str:
        return f"{self.__repr__()}\n" + "\n".join(
            f"  {k} = {v}" for k, v in self.__dict__.items()
        )
