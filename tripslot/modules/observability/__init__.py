"""modules/observability: JSONL performance logging."""
from tripslot.modules.observability.logger import StructuredLogger

__all__ = ["StructuredLogger"]
