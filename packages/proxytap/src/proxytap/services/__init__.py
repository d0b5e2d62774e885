"""proxytap service layer.

Services wrap the store, stream and daemon client behind operations that
REPL commands can call directly.

PUBLIC API:
  - TrafficService: Owner of observed traffic state
  - TrafficSnapshot: Immutable state view
  - CaptureService: Capture start/stop
  - DispatchService: Ad-hoc request dispatch with history
"""

from proxytap.services.capture import CaptureService
from proxytap.services.dispatch import DispatchService
from proxytap.services.main import TrafficService, TrafficSnapshot

__all__ = ["TrafficService", "TrafficSnapshot", "CaptureService", "DispatchService"]
