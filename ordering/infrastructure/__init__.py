"""
Infrastructure layer - Logging, configuration, error handling and storage implementations.
"""
