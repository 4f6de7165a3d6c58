"""Implementation modules behind ``inline_chat.base.cancellation``."""
