"""Core domain package for breadwatch.

Core contains the eligibility filter, post statistics and the processing
pipeline without any Telegram or storage-specific code.
"""
