from .document import Document  # noqa: F401
