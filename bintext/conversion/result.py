"""Result model for file conversion operations."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class ConversionOutcome(str, Enum):
    """Terminal state of a conversion run."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class ConversionResult:
    """Result of a conversion operation."""

    outcome: ConversionOutcome
    source_path: Path
    dest_path: Path

    chunk_size: int = 1
    total_chunks: int = 0
    chunks_written: int = 0
    bytes_read: int = 0
    chars_written: int = 0
    duration_seconds: float = 0.0

    error_message: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.outcome is ConversionOutcome.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.outcome is ConversionOutcome.CANCELLED

    @property
    def failed(self) -> bool:
        return self.outcome is ConversionOutcome.FAILED

    @property
    def throughput_mbps(self) -> float:
        """Calculate source throughput in MB/s."""
        if self.duration_seconds == 0:
            return 0.0
        mb = self.bytes_read / 1024**2
        return mb / self.duration_seconds

    def to_dict(self) -> dict[str, Any]:
        """Convert result to a JSON-friendly dictionary."""
        return {
            "outcome": self.outcome.value,
            "source_path": str(self.source_path),
            "dest_path": str(self.dest_path),
            "chunk_size": self.chunk_size,
            "total_chunks": self.total_chunks,
            "chunks_written": self.chunks_written,
            "bytes_read": self.bytes_read,
            "chars_written": self.chars_written,
            "duration_seconds": round(self.duration_seconds, 6),
            "error_message": self.error_message,
        }
