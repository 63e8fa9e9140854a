from .errors import (
    InvalidUserIdError,
    parse_user_id,
    register_api_error_handlers,
    request_validation_error_handler,
    tradebot_error_handler,
    unexpected_error_handler,
)

__all__ = [
    "InvalidUserIdError",
    "parse_user_id",
    "register_api_error_handlers",
    "request_validation_error_handler",
    "tradebot_error_handler",
    "unexpected_error_handler",
]
