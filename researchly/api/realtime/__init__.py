"""Realtime WebSocket gateway: authentication, connections, dispatch and handlers."""
