from .entry_code import generate_entry_code as generate_entry_code
from .hooks import HookResult as HookResult, hook as hook
from .main_process import MainProcess as MainProcess
from .ports import find_open_ports as find_open_ports, get_address as get_address
