"""
실시간 이벤트 어댑터

WebSocket 브로드캐스트.
IBroadcaster Protocol 준수.
"""

from adapters.realtime.broadcaster import WebSocketBroadcaster

__all__ = [
    "WebSocketBroadcaster",
]
