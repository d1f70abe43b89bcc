"""Client context resolution for login attempts.

Fills the network/client fields a caller left blank from what the server
observes on the transport (proxy headers, peer address, user agent), and
clips every field to the width of its procedure parameter.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping, Optional

from user_agents import parse as parse_user_agent

from .validators import clip, is_blank

UNKNOWN = "Desconocido"
MOBILE = "Mobile"
DESKTOP = "Desktop"

IP_MAX_LENGTH = 50
USER_AGENT_MAX_LENGTH = 200
AGENT_FIELD_MAX_LENGTH = 50

# Checked in order; first non-blank wins
PROXY_IP_HEADERS = ("CF-Connecting-IP", "X-Forwarded-For", "X-Real-IP", "X-Original-For")

IPV6_LOOPBACK = "::1"
IPV4_LOOPBACK = "127.0.0.1"


@dataclass(frozen=True)
class TransportInfo:
    """Read-only view of the transport state needed for enrichment."""
    headers: Mapping[str, str] = field(default_factory=dict)
    peer_address: Optional[str] = None
    remote_addr: Optional[str] = None
    user_agent: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        value = self.headers.get(name)
        if value is not None:
            return value
        wanted = name.lower()
        for key, candidate in self.headers.items():
            if key.lower() == wanted:
                return candidate
        return None


@dataclass(frozen=True)
class AgentInfo:
    os: str = UNKNOWN
    device: str = DESKTOP
    browser: str = UNKNOWN


@dataclass(frozen=True)
class ClientContext:
    ip: str = ""
    user_agent: str = ""
    os: str = ""
    device: str = ""
    browser: str = ""

    def to_dict(self) -> dict:
        return {
            "Ip": self.ip,
            "UserAgent": self.user_agent,
            "SistemaOperativo": self.os,
            "Dispositivo": self.device,
            "Browser": self.browser,
        }


def _normalize_loopback(address: Optional[str]) -> Optional[str]:
    return IPV4_LOOPBACK if address == IPV6_LOOPBACK else address


def resolve_client_ip(transport: TransportInfo) -> str:
    """Resolve the client IP from proxy headers, then the peer address.

    Returns:
        First comma token of the first non-blank proxy header, else the
        transport peer address, else ``REMOTE_ADDR``; ``::1`` reported as
        ``127.0.0.1``. Empty string when nothing is known.
    """
    for name in PROXY_IP_HEADERS:
        value = transport.header(name)
        if not is_blank(value):
            return _normalize_loopback(value.split(",")[0].strip())

    address = transport.peer_address
    if is_blank(address):
        address = transport.remote_addr
    return _normalize_loopback(address) or ""


def detect_agent(user_agent: Optional[str]) -> AgentInfo:
    """Derive OS family, device class and browser from a user-agent string."""
    if is_blank(user_agent):
        return AgentInfo()

    parsed = parse_user_agent(user_agent)

    os_family = parsed.os.family
    if not os_family or os_family == "Other":
        os_family = UNKNOWN

    device = MOBILE if (parsed.is_mobile or parsed.is_tablet) else DESKTOP

    browser_family = parsed.browser.family
    if not browser_family or browser_family == "Other":
        browser = UNKNOWN
    else:
        browser = f"{browser_family} {parsed.browser.version_string}".strip()

    return AgentInfo(os=os_family, device=device, browser=browser)


def enrich_context(
    transport: TransportInfo,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
    os: Optional[str] = None,
    device: Optional[str] = None,
    browser: Optional[str] = None,
) -> ClientContext:
    """Build a fully populated, width-clipped client context.

    Caller-supplied values win over anything derived from the transport.
    """
    resolved_ip = resolve_client_ip(transport) if is_blank(ip) else ip
    resolved_agent = (transport.user_agent or "") if is_blank(user_agent) else user_agent

    agent = detect_agent(transport.user_agent)
    resolved_os = agent.os if is_blank(os) else os
    resolved_device = agent.device if is_blank(device) else device
    resolved_browser = agent.browser if is_blank(browser) else browser

    return ClientContext(
        ip=clip(resolved_ip, IP_MAX_LENGTH),
        user_agent=clip(resolved_agent, USER_AGENT_MAX_LENGTH),
        os=clip(resolved_os, AGENT_FIELD_MAX_LENGTH),
        device=clip(resolved_device, AGENT_FIELD_MAX_LENGTH),
        browser=clip(resolved_browser, AGENT_FIELD_MAX_LENGTH),
    )
