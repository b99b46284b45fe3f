# Name under which every fetched module sees the application's global object.
GLOBAL_OBJECT_NAME = "__global__"

# Name under which every fetched module sees the cache's require coroutine.
REQUIRE_NAME = "require"

DEFAULT_ENTRY_MODULE = "app"

DASHBOARD_INDEX = "index.html"
DASHBOARD_BUNDLE = "main.bundle.js"
DASHBOARD_BUNDLE_PATH = "/" + DASHBOARD_BUNDLE
