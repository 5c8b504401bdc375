from .context import ClipboardReader, ContextReader, SelectionReader, no_context

__all__ = ["ClipboardReader", "ContextReader", "SelectionReader", "no_context"]
