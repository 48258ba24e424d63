class CollectionNames:
    """MongoDB collection names used by the repositories."""

    REQUEST_LOGS = "request_logs"
