"""Core business logic: rule table, scoring, copy and report building.

This module is framework-agnostic. It has no dependency on MCP, Starlette,
or any server framework. The server and the smoke test import from here.
"""
