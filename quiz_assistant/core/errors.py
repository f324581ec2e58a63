from __future__ import annotations


class QuizAssistantError(Exception):
    """Base class for errors the API turns into `{"error": ..., "timestamp": ...}`."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DataUnavailable(QuizAssistantError):
    """The corpus could not be loaded (metadata missing or unreadable)."""


class CorpusSchemaError(DataUnavailable):
    """A corpus payload arrived but does not have the expected shape."""


class ShardGap(QuizAssistantError):
    """A single chunk shard could not be fetched. Tolerated by the shard scan."""

    def __init__(self, index: int, reason: str):
        super().__init__(f"chunks_{index}.json: {reason}")
        self.index = index
        self.reason = reason


class ImageMissing(QuizAssistantError):
    status_code = 400


class CredentialMissing(QuizAssistantError):
    status_code = 500


class UpstreamCallFailure(QuizAssistantError):
    """The completion service call for `stage` failed."""

    status_code = 500

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage


class ExtractionParseFailure(QuizAssistantError):
    """The extraction response yielded no usable question."""
