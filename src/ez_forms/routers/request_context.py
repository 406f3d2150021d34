"""Transport metadata captured alongside submissions"""

from typing import Optional

from fastapi import Request


def client_ip(request: Request) -> Optional[str]:
    """
    Best-effort client address.

    Prefers the first hop of X-Forwarded-For, then X-Real-IP, then the socket
    peer (which ProxyHeadersMiddleware already rewrites behind a trusted proxy).
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return None


def user_agent(request: Request) -> Optional[str]:
    agent = request.headers.get("user-agent")
    return agent.strip() if agent and agent.strip() else None
