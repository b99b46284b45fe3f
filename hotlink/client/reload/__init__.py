from .reload_coordinator import ReloadCoordinator as ReloadCoordinator
from .reload_outcome import ReloadOutcome as ReloadOutcome
from .reload_request import ReloadRequest as ReloadRequest
