from .settings import DEFAULT_MAX_HEADER_BYTES, ContractSettings, load_settings
from .store import ConfigStore

__all__ = ["ConfigStore", "ContractSettings", "DEFAULT_MAX_HEADER_BYTES", "load_settings"]
