import json

from core.config import Config, ProxySettings
from ui.dashboard import Dashboard


def test_forward_and_response_are_written_to_cli_log(isolated_logs):
    dashboard = Dashboard(Config())

    dashboard.log_forward("GET", "https://example.com/a", [("X-Api-Key", "secret-value-123")])
    dashboard.log_response("GET", "https://example.com/a", 200)

    log = (isolated_logs / "proxy.log").read_text()
    assert "FORWARD: Proxying GET request to: https://example.com/a" in log
    assert "RESPONSE: Proxied GET https://example.com/a status=200" in log
    assert not (isolated_logs / "outbound").exists()


def test_debug_writes_redacted_outbound_log(isolated_logs):
    dashboard = Dashboard(Config(proxy=ProxySettings(debug=True)))

    dashboard.log_forward("POST", "https://example.com/b", [("X-Api-Key", "secret-value-123"), ("Accept", "*/*")])

    [entry] = list((isolated_logs / "outbound").glob("*.json"))
    payload = json.loads(entry.read_text())
    assert payload["method"] == "POST"
    assert payload["headers"] == [["X-Api-Key", "secret...-123"], ["Accept", "*/*"]]


def test_counters_and_errors(isolated_logs):
    dashboard = Dashboard(Config())

    dashboard.log_skipped_header("outbound", "Salt-Bad")
    dashboard.log_error("RequestFailed", 502, "Failed to send request: refused")
    dashboard.log_event("INFO", "Configuring upstream proxy", proxy="u:***@proxy:3128")

    assert dashboard._counts["skipped_headers"] == 1
    assert dashboard._counts["errors"] == 1
    assert dashboard._errors == ["RequestFailed 502: Failed to send request: refused"]
    assert dashboard._upstream == "u:***@proxy:3128"
    log = (isolated_logs / "proxy.log").read_text()
    assert "WARNING: Skipped header that cannot be re-encoded direction=outbound name=Salt-Bad" in log
    assert "ERROR: Failed to send request: refused kind=RequestFailed status=502" in log


def test_layout_renders_before_and_after_requests():
    dashboard = Dashboard(Config())
    dashboard._build_layout()

    dashboard.log_response("GET", "https://example.com/" + "x" * 200, 404)
    layout = dashboard._build_layout()

    assert layout["body"] is not None
    assert dashboard._recent[0].url.endswith("...")
