from .client import UnifiedChatClient, Route, route_model
from .conversation import Conversation
from .config import Settings
from .errors import ErrorKind, ErrorRecord
from .types import ChatResult, ConversationTurn, Provider, Role
from .rich_llm_printer import RichPrinter
from .log import setup_logging

__all__ = [
    "UnifiedChatClient",
    "Route",
    "route_model",
    "Conversation",
    "Settings",
    "ErrorKind",
    "ErrorRecord",
    "ChatResult",
    "ConversationTurn",
    "Provider",
    "Role",
    "RichPrinter",
    "setup_logging",
]
