from .hook import hook as hook
from .hook_result import HookResult as HookResult
