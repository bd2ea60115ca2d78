# Collector / strategy / executor engine
from .core import Collector, Strategy, Executor, Engine
from .collector import AoriCollector
from .executor import AoriExecutor, LoggingExecutor, SendPayload

__all__ = [
    "Collector", "Strategy", "Executor", "Engine",
    "AoriCollector", "AoriExecutor", "LoggingExecutor", "SendPayload",
]
