"""Core domain package for threadwatch.

Core contains activity classification, root selection, caching, and the
second-chance time correction without any HTTP client code, keeping the
business logic portable.
"""
