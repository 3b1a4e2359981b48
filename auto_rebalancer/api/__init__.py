"""HTTP surface of the engine."""

from .server import dispatch_action, error_status, handle_request, serve_engine_api

__all__ = ['dispatch_action', 'error_status', 'handle_request', 'serve_engine_api']
