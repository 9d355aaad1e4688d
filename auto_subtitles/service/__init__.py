"""Job orchestration: the transcription service and its worker pool."""

from auto_subtitles.service.transcribe import TranscribeService
from auto_subtitles.service.workers import PoolExhaustedError, WorkerPool, WorkerState

__all__ = ["PoolExhaustedError", "TranscribeService", "WorkerPool", "WorkerState"]
