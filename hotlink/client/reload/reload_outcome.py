from enum import Enum


class ReloadOutcome(Enum):
    SUPPRESSED = "suppressed"
    RESTARTED = "restarted"
    REENTERED = "reentered"
