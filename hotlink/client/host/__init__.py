from .host_runtime import (
    HostRuntime as HostRuntime,
    exec_restart as exec_restart,
)
from .registration import (
    FACTORY_NAME as FACTORY_NAME,
    register as register,
    unregister as unregister,
)
