"""
Common building blocks shared by the NLU settings core and its entry points.

This package contains reusable, domain-agnostic code:

- configuration loading (environment variables)
- logging configuration
- key-value stores for settings blobs
- the HTTP transport used to reach the NLU provider
"""
