from .compilation_state import (
    CompilationStateTracker as CompilationStateTracker,
    CompilationToken as CompilationToken,
)
