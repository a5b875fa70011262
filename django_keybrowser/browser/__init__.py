"""Client-side state of the key browser, driven through the JSON API."""

from django_keybrowser.browser.api import HttpKeysApi, KeysApi
from django_keybrowser.browser.notify import LoggingNotifier, NotificationPort, NullNotifier
from django_keybrowser.browser.session import ActionResult, KeyBrowserSession
from django_keybrowser.browser.store import KeyStore, merge_key_info, merge_key_names
from django_keybrowser.browser.tabs import OpenTabSet
from django_keybrowser.browser.values import ValueCache

__all__ = [
    "ActionResult",
    "HttpKeysApi",
    "KeyBrowserSession",
    "KeyStore",
    "KeysApi",
    "LoggingNotifier",
    "NotificationPort",
    "NullNotifier",
    "OpenTabSet",
    "ValueCache",
    "merge_key_info",
    "merge_key_names",
]
