from .collector import CycleResult, DataCollector

__all__ = ["CycleResult", "DataCollector"]
