"""Host channel adapters."""
from channels.adapter import BotAdapter, send_error_message, ERROR_MESSAGE

__all__ = ["BotAdapter", "send_error_message", "ERROR_MESSAGE"]
