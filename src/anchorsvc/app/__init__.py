"""Application runtime exports."""

from anchorsvc.app.bootstrap import build_runtime
from anchorsvc.app.runtime import AnchorRuntime, read_requests

__all__ = ["AnchorRuntime", "build_runtime", "read_requests"]
