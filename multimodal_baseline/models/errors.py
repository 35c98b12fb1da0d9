"""Exceptions crossing the extractor boundary"""

from multimodal_baseline.models.enums import MultimodalErrorCode


class MultimodalError(Exception):
    """Raised by feature extractors when a modality cannot be produced.

    Attributes:
        code: Failure category
        recoverable: Whether retrying with the same media could succeed
    """

    def __init__(self, message: str, code: MultimodalErrorCode, recoverable: bool = False):
        super().__init__(message)
        self.code = code
        self.recoverable = recoverable

    def __repr__(self) -> str:
        return (
            f"MultimodalError(message='{self}', code={self.code.value}, "
            f"recoverable={self.recoverable})"
        )
