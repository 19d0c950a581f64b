from pathlib import Path
from typing import Any, Dict, Optional, Union

from .models.enums import ErrorCode


class NuScenesDataError(Exception):
    def __init__(self, code: ErrorCode, message: str, detail: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.detail = detail
        super().__init__(f"{code.value}: {message}")


class DatasetFileError(NuScenesDataError):
    """A dataset file could not be turned into records"""

    def __init__(
        self,
        code: ErrorCode,
        path: Union[str, Path],
        cause: Optional[BaseException] = None,
        message: Optional[str] = None,
    ):
        self.path = Path(path)
        self.cause = cause
        if message is None:
            message = f"failed to load file {self.path}: {cause}"
        super().__init__(code, message, {"path": str(self.path)})


class DatasetIOError(DatasetFileError):
    def __init__(self, path: Union[str, Path], cause: Optional[BaseException] = None):
        super().__init__(ErrorCode.IO, path, cause)


class MalformedInputError(DatasetFileError):
    def __init__(
        self,
        path: Union[str, Path],
        cause: Optional[BaseException] = None,
        message: Optional[str] = None,
    ):
        super().__init__(ErrorCode.MALFORMED_INPUT, path, cause, message)


class CorruptedDatasetError(NuScenesDataError):
    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.CORRUPTED_DATASET, message, detail)


class TokenParseError(NuScenesDataError, ValueError):
    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.PARSE, message, detail)


class InternalBugError(NuScenesDataError):
    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.INTERNAL_BUG, f"{message} (please report this bug)", detail)
