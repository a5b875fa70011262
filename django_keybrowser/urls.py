"""URLconf for the key browser API.

Mount it under any prefix::

    path("redis/", include("django_keybrowser.urls")),

Suffixed key routes are listed before the bare key route so ``<path:key>``
does not swallow ``/info``, ``/value`` and friends.
"""

from django.urls import path

from django_keybrowser import views

app_name = "django_keybrowser"

urlpatterns = [
    path("connections", views.connections, name="connections"),
    path("connections/<str:name>/stats", views.stats, name="stats"),
    path("connections/<str:name>/summary", views.summary, name="summary"),
    path("connections/<str:name>/databases/<str:db>/size", views.database_size_view, name="database_size"),
    path("connections/<str:name>/keys", views.keys, name="keys"),
    path("connections/<str:name>/keys/flush", views.keys_flush, name="keys_flush"),
    path("connections/<str:name>/keys/<path:key>/info", views.key_info, name="key_info"),
    path("connections/<str:name>/keys/<path:key>/value", views.key_value, name="key_value"),
    path("connections/<str:name>/keys/<path:key>/rename", views.key_rename, name="key_rename"),
    path("connections/<str:name>/keys/<path:key>/expire", views.key_expire, name="key_expire"),
    path("connections/<str:name>/keys/<path:key>", views.key_delete, name="key_delete"),
]
