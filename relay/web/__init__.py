from . web_server import WebServer
from . request_id import RequestIdMiddleware, REQ_ID_HEADER
__all__ = ['WebServer', 'RequestIdMiddleware', 'REQ_ID_HEADER']
