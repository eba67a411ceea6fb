"""Core domain package for agora.

Core contains the member directory, mention extraction, visibility and
rendering logic without any storage or markup-library specific code, keeping
the content pipeline portable.
"""
