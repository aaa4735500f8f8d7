"""
Pytest fixtures for the RestKit test suite.

Fixtures are organized by subsystem:
- http_mocking: MockTransport servers (echo and routed) and response builders
"""
