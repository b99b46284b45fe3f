from .content_responder import ContentResponder as ContentResponder
from .entry_module_transformer import (
    EntryModuleTransformer as EntryModuleTransformer,
    bound_names as bound_names,
)
from .preferences_responder import PreferencesResponder as PreferencesResponder
from .resource_loader import ResourceLoader as ResourceLoader
from .response_info import ResponseInfo as ResponseInfo
