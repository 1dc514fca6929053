"""
WhatsApp channel re-exports.
"""
from channels.whatsapp.client import (
    WhatsAppClient,
    WhatsAppError,
    WhatsAppNotConfiguredError,
    WhatsAppTimeoutError,
    is_timeout_error,
    send_text_message,
    to_jid,
)
from channels.whatsapp.config import WhatsAppConfig, load_whatsapp_config
from channels.whatsapp.notifier import PositionsNotifier, SendResult, notifier

__all__ = [
    "WhatsAppClient",
    "WhatsAppError",
    "WhatsAppNotConfiguredError",
    "WhatsAppTimeoutError",
    "is_timeout_error",
    "send_text_message",
    "to_jid",
    "WhatsAppConfig",
    "load_whatsapp_config",
    "PositionsNotifier",
    "SendResult",
    "notifier",
]
