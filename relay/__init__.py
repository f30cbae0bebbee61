__version__ = "0.2.0"

# version of the JSON-RPC protocol spoken by the relay, reported by 'server.info'
PROTOCOL_VERSION = "0.2"
