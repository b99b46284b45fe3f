from .live_client import (
    ClientOptions as ClientOptions,
    LiveUpdateClient as LiveUpdateClient,
    launch as launch,
    run as run,
)
