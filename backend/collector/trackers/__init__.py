from .lobbies import LobbyTracker
from .notifications import NotificationDetector
from .sessions import ActiveSession, SessionTracker
from .social import SocialTracker

__all__ = [
    "ActiveSession",
    "LobbyTracker",
    "NotificationDetector",
    "SessionTracker",
    "SocialTracker",
]
