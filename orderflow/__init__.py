"""
Order flow engine.

- backend/: FastAPI service, order flow state machine, persistence, configuration
- cli/: Admin CLI (Typer + Rich) over the REST API
- telegram/: Order forwarding bot (aiogram v3)
"""
