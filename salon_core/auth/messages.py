# =============================================================================
# salon_core/auth/messages.py
# Localized User-Facing Messages for Session and Tenant Errors
# =============================================================================
"""
Caller-visible messages for authentication and tenant failures.

Turkish is the default locale; English is available. Unknown locales fall
back to Turkish and unknown keys return the key itself.
"""

from typing import Dict

DEFAULT_LOCALE = "tr"

MESSAGES: Dict[str, Dict[str, str]] = {
    "tr": {
        "auth_required": "Kullanıcı oturumu gerekli. Lütfen giriş yapın.",
        "tenant_denied": "Bu veriye erişim yetkiniz bulunmamaktadır.",
        "session_not_found": "Kullanıcı oturumu bulunamadı",
        "offline": "İnternet bağlantısı yok",
    },
    "en": {
        "auth_required": "A user session is required. Please sign in.",
        "tenant_denied": "You are not authorized to access this data.",
        "session_not_found": "User session not found",
        "offline": "No internet connection",
    },
}


def get_message(key: str, locale: str = DEFAULT_LOCALE) -> str:
    """
    Look up a localized message.

    Args:
        key: Message key (e.g. "auth_required")
        locale: "tr" or "en"

    Returns:
        The message text
    """
    table = MESSAGES.get(locale, MESSAGES[DEFAULT_LOCALE])
    return table.get(key, MESSAGES[DEFAULT_LOCALE].get(key, key))
