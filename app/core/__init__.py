from .errors import ErrorKind, ExtractionFailure, ResolutionError

__all__ = ["ErrorKind", "ExtractionFailure", "ResolutionError"]
