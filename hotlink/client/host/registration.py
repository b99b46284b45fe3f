"""
Optional adapter installing the client factory onto a host namespace.

Hosts that expect a well-known global entry point (for example the
``builtins`` module) call ``register(namespace)`` once; the generated
bootstrap can then call the factory by name with the application's global
object and the ``{fPort, ePort, host}`` options.
"""

from typing import Any

FACTORY_NAME = "hotlink_run"


def register(namespace: Any, name: str = FACTORY_NAME):
    from hotlink.client.live_client import launch

    setattr(namespace, name, launch)

    return launch


def unregister(namespace: Any, name: str = FACTORY_NAME):
    if hasattr(namespace, name):
        delattr(namespace, name)
