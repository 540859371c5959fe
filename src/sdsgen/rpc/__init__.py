"""Line-delimited JSON-RPC front door (MCP-style tools)."""

from .server import RpcServer

__all__ = ["RpcServer"]
