from .errors import (
    ModuleExecutionError as ModuleExecutionError,
    ModuleFetchError as ModuleFetchError,
)
from .module_cache import (
    ModuleCache as ModuleCache,
    ModuleCacheEntry as ModuleCacheEntry,
)
from .module_fetcher import (
    ModuleFetcher as ModuleFetcher,
    module_path as module_path,
)
from .module_loader import ModuleLoader as ModuleLoader
