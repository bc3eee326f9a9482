from .api import ApiRequestError, StatementApiClient, StatementBackend
from .conversation import ConversationClosed, ConversationController
from .state import AppState, IngestionStateMachine

__all__ = [
    "ApiRequestError",
    "AppState",
    "ConversationClosed",
    "ConversationController",
    "IngestionStateMachine",
    "StatementApiClient",
    "StatementBackend",
]
