"""
Integrations layer.
This package contains all code used to communicate with external systems:
- the BI server (sign-in, view catalog pages, rendered view images)
- Slack (messages, view list menus, file uploads, response_url updates)

Key rule:
- The catalog and bot layers MUST NOT issue HTTP calls directly.
- They call integration clients (under dashbot/integrations/clients and dashbot/integrations/slack).
- The MOCK BI client serves development and tests; the REAL_HTTP client talks to the server.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (dashbot/bot/runtime.py),
  driven by INTEGRATIONS_MODE.
"""
