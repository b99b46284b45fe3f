from typing import Hashable

CompilationToken = Hashable


class CompilationStateTracker:
    """
    Counts compilations in flight on the development machine.

    Tokens are correlation ids only. The tracker keeps no per-token registry,
    so a ``finished`` for a token it never saw still decrements, and the
    count is floored at zero instead of raising.
    """

    def __init__(self) -> None:
        self._outstanding = 0

    @property
    def outstanding(self) -> int:
        return self._outstanding

    @property
    def compiling(self) -> bool:
        return self._outstanding > 0

    def started(self, token: CompilationToken) -> None:
        self._outstanding += 1

    def finished(self, token: CompilationToken) -> None:
        self._outstanding = max(0, self._outstanding - 1)

    def reset(self) -> None:
        self._outstanding = 0
