from .logger import LogLevel, VerifierLogger, get_logger, set_logger

__all__ = [
    'LogLevel',
    'VerifierLogger',
    'get_logger',
    'set_logger',
]
