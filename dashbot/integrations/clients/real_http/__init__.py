"""
Real HTTP integration clients.

These clients communicate with the BI server over HTTP.

Important:
- Must implement the same interface as the mock clients
- Must return data shaped according to dashbot/integrations/contracts/*
"""
from .bi_server import BIServerClient

__all__ = ["BIServerClient"]
