import orjson

from hotlink.client.host import FACTORY_NAME

BOOTSTRAP_TEMPLATE = """\
import sys

import hotlink.client

hotlink.client.launch(sys.modules[__name__], {options})
"""

REGISTERED_BOOTSTRAP_TEMPLATE = """\
import builtins
import sys

import hotlink.client.host

hotlink.client.host.register(builtins)
builtins.{factory}(sys.modules[__name__], {options})
"""


def generate_entry_code(
    f_port: int,
    e_port: int,
    host: str,
    registered: bool = False,
) -> str:
    """
    Source of the bootstrap module shipped in place of the application's
    entry module. It starts the live update client, which then fetches the
    real entry module from the content server.

    With ``registered`` the factory is first installed on ``builtins`` and
    called by name from there.
    """
    options = orjson.dumps(
        {
            "fPort": f_port,
            "ePort": e_port,
            "host": host,
        }
    ).decode()

    if registered:
        return REGISTERED_BOOTSTRAP_TEMPLATE.format(
            factory=FACTORY_NAME,
            options=options,
        )

    return BOOTSTRAP_TEMPLATE.format(options=options)
