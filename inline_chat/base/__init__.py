"""Core building blocks: cancellation, errors, logging, models, guards,
executors, the streaming pipeline and the rate limiter.

Import from the submodules (``inline_chat.base.streaming``,
``inline_chat.base.rate_limit`` ...); this package keeps no re-exports so that
importing a leaf module never drags in the whole pipeline.
"""
