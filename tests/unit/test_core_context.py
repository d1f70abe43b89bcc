"""Tests for client context enrichment (IP, user agent, device detection)."""
from directorio.core.context import (
    DESKTOP,
    MOBILE,
    UNKNOWN,
    TransportInfo,
    detect_agent,
    enrich_context,
    resolve_client_ip,
)

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


class TestResolveClientIp:
    def test_first_forwarded_for_token(self):
        transport = TransportInfo(headers={"X-Forwarded-For": "10.0.0.5, 10.0.0.1"}, peer_address="172.17.0.1")
        assert resolve_client_ip(transport) == "10.0.0.5"

    def test_header_names_are_case_insensitive(self):
        transport = TransportInfo(headers={"x-real-ip": "192.168.1.20"})
        assert resolve_client_ip(transport) == "192.168.1.20"

    def test_cloudflare_header_has_priority(self):
        transport = TransportInfo(headers={"X-Forwarded-For": "10.0.0.5", "CF-Connecting-IP": "203.0.113.9"})
        assert resolve_client_ip(transport) == "203.0.113.9"

    def test_blank_header_is_skipped(self):
        transport = TransportInfo(headers={"X-Forwarded-For": "  ", "X-Real-IP": "10.1.1.1"})
        assert resolve_client_ip(transport) == "10.1.1.1"

    def test_ipv6_loopback_peer(self):
        assert resolve_client_ip(TransportInfo(peer_address="::1")) == "127.0.0.1"

    def test_remote_addr_fallback(self):
        assert resolve_client_ip(TransportInfo(remote_addr="10.9.9.9")) == "10.9.9.9"

    def test_nothing_known(self):
        assert resolve_client_ip(TransportInfo()) == ""


class TestDetectAgent:
    def test_blank_user_agent(self):
        agent = detect_agent(None)
        assert agent.os == UNKNOWN
        assert agent.device == DESKTOP
        assert agent.browser == UNKNOWN

    def test_desktop_browser(self):
        agent = detect_agent(CHROME_WINDOWS)
        assert agent.os == "Windows"
        assert agent.device == DESKTOP
        assert agent.browser.startswith("Chrome")

    def test_mobile_device(self):
        agent = detect_agent(SAFARI_IPHONE)
        assert agent.os == "iOS"
        assert agent.device == MOBILE


class TestEnrichContext:
    def test_caller_values_win(self):
        transport = TransportInfo(headers={"X-Forwarded-For": "10.0.0.5"}, user_agent=CHROME_WINDOWS)
        context = enrich_context(transport, ip="1.2.3.4", os="Linux", device="Kiosk", browser="Custom")
        assert context.ip == "1.2.3.4"
        assert context.os == "Linux"
        assert context.device == "Kiosk"
        assert context.browser == "Custom"
        assert context.user_agent == CHROME_WINDOWS

    def test_blank_fields_are_derived(self):
        transport = TransportInfo(peer_address="::1", user_agent=CHROME_WINDOWS)
        context = enrich_context(transport, ip="  ")
        assert context.ip == "127.0.0.1"
        assert context.os == "Windows"
        assert context.device == DESKTOP

    def test_fields_are_clipped(self):
        transport = TransportInfo(user_agent="A" * 500)
        context = enrich_context(transport, ip="9" * 80, browser="B" * 80)
        assert len(context.ip) == 50
        assert len(context.user_agent) == 200
        assert len(context.browser) == 50

    def test_no_transport_state(self):
        context = enrich_context(TransportInfo())
        assert context.ip == ""
        assert context.user_agent == ""
        assert context.os == UNKNOWN

    def test_to_dict_keys(self):
        context = enrich_context(TransportInfo(peer_address="10.0.0.1"))
        assert set(context.to_dict()) == {"Ip", "UserAgent", "SistemaOperativo", "Dispositivo", "Browser"}
