"""Exception hierarchy for the smart-reply pipeline."""


class SmartReplyError(Exception):
    """Base class for all smart-reply errors."""


class AnalysisError(SmartReplyError):
    """The AI context analysis call failed or returned something unusable."""


class PipelineStageError(SmartReplyError):
    """A pipeline stage without a fallback raised."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage}: {message}")
        self.stage = stage


class SettingsValidationError(SmartReplyError, ValueError):
    """A conversation settings update was rejected."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors
