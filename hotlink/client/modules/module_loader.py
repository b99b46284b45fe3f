import ast
import inspect
import types
from typing import Any, Awaitable, Callable

from hotlink.constants import GLOBAL_OBJECT_NAME, REQUIRE_NAME

from .errors import ModuleExecutionError, ModuleFetchError
from .module_fetcher import module_path

Require = Callable[[str], Awaitable[types.ModuleType]]


class ModuleLoader:
    """
    Executes fetched source the way the interpreter executes a module body,
    with two names injected into the module namespace: the application's
    global object and ``require``. Module bodies are compiled with top-level
    ``await`` allowed, so ``helpers = await require("helpers")`` works.
    """

    def __init__(
        self,
        global_object: Any,
        global_name: str = GLOBAL_OBJECT_NAME,
        origin: str = "hotlink:/",
    ) -> None:
        self.global_object = global_object
        self.global_name = global_name
        self.origin = origin.rstrip("/")

    def create(self, name: str) -> types.ModuleType:
        module = types.ModuleType(name)
        module.__file__ = self.origin + module_path(name)
        module.__package__ = name.rpartition(".")[0]

        return module

    async def execute(
        self,
        module: types.ModuleType,
        source: str,
        require: Require,
    ) -> types.ModuleType:
        namespace = module.__dict__
        namespace[self.global_name] = self.global_object
        namespace[REQUIRE_NAME] = require

        try:
            code = compile(
                source,
                module.__file__,
                "exec",
                flags=ast.PyCF_ALLOW_TOP_LEVEL_AWAIT,
                dont_inherit=True,
            )

        except (SyntaxError, ValueError) as compile_error:
            raise ModuleExecutionError(
                f"Module '{module.__name__}' failed to compile: {compile_error}",
                name=module.__name__,
            ) from compile_error

        try:
            result = eval(code, namespace)
            if code.co_flags & inspect.CO_COROUTINE:
                await result

        except (ModuleFetchError, ModuleExecutionError):
            raise

        except Exception as execution_error:
            raise ModuleExecutionError(
                f"Module '{module.__name__}' raised during execution: {execution_error!r}",
                name=module.__name__,
            ) from execution_error

        return module
