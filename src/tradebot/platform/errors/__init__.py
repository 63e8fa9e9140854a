from .tradebot_error import ErrorKind, TradeBotError, UserMessageCategory
from .user_messages import UserFacingMessage, report_error, resolve_user_facing_message

__all__ = [
    "ErrorKind",
    "TradeBotError",
    "UserFacingMessage",
    "UserMessageCategory",
    "report_error",
    "resolve_user_facing_message",
]
