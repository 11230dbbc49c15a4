from textual.message import Message

class LoadMoreRequested(Message):
    """The last article scrolled into view."""
