"""
Shared utilities for the Heritage Console data-access layer.

This package aggregates the ambient building blocks consumed by the console
client and its controllers:

- config: Console configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics for the request client
- errors: Canonical error types and the normalized error model
- retry: Recursive exponential-backoff retry policy

Do not import from heritage_console into shared/.
"""
