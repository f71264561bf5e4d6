from .transcription import Transcriber, TranscriptionError, WhisperTranscriber

__all__ = ["Transcriber", "TranscriptionError", "WhisperTranscriber"]
