from .detector import Contract, Mode, default_headers, detect_contract

__all__ = ["Contract", "Mode", "default_headers", "detect_contract"]
