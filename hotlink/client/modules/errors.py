class ModuleFetchError(ModuleNotFoundError):
    """
    Raised when an application module cannot be fetched from the
    development machine: a non-200 response, a transport failure or a
    timeout. Fatal to the ``require`` call that triggered it.
    """

    def __init__(
        self,
        message: str,
        name: str,
        url: str,
        status: int | None = None,
    ) -> None:
        super().__init__(message, name=name)
        self.url = url
        self.status = status


class ModuleExecutionError(ImportError):
    """Raised when fetched module source fails to compile or execute."""

    def __init__(self, message: str, name: str) -> None:
        super().__init__(message, name=name)
