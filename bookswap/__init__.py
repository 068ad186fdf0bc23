"""BookSwap 点对点换书：REST 后端 + 带会话的 API 客户端"""

__version__ = "0.1.0"
