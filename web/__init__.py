"""
Web application package for the grid capture game.

Provides the FastAPI app (WebSocket game channel, REST helpers, static browser
client) and the SessionCoordinator that shares one game between connections.
Run locally with `python -m web.app` or `uvicorn web.app:app`.
"""
