"""
Jira Xray Client - Test Suite Package.

Unit tests for request building, the HTTP client, the Xray JSON model,
configuration loading and the command line.
"""
