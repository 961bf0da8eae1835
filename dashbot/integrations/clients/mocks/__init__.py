"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- No BI server is reachable from the development machine
- We want to exercise search and fulfillment end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients should return data shaped according to dashbot/integrations/contracts/*
"""
from .bi_server import MockBIServerClient

__all__ = ["MockBIServerClient"]
