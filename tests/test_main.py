from __future__ import annotations

import base64
from pathlib import Path

import pytest


def test_parser_requires_source_and_output() -> None:
    from cdp_protocols.pdf.main import build_parser

    parser = build_parser()
    args = parser.parse_args(["print", "https://example.com", "-o", "out.pdf", "--landscape"])
    assert args.command == "print"
    assert args.url == "https://example.com"
    assert args.output == Path("out.pdf")
    assert args.landscape is True

    with pytest.raises(SystemExit):
        parser.parse_args(["print", "-o", "out.pdf"])


def test_config_from_args_overrides_env(monkeypatch) -> None:  # noqa: ANN001
    from cdp_protocols.pdf.main import build_parser, config_from_args

    monkeypatch.delenv("CDP_PDF_WS_URL", raising=False)
    args = build_parser().parse_args(
        ["--port", "9333", "--runtime-exceptions", "raise", "screenshot", "https://example.com", "-o", "a.png"]
    )
    cfg = config_from_args(args)
    assert cfg.cdp_port == 9333
    assert cfg.unhandled_runtime_exceptions == "raise"


def test_main_writes_rendered_bytes(monkeypatch, tmp_path) -> None:  # noqa: ANN001
    from cdp_protocols.pdf import main as cli

    captured: dict = {}

    def fake_render(args, config):  # noqa: ANN001, ANN202
        captured["source"] = args.url
        captured["timeout"] = config.timeout
        return base64.b64decode(base64.b64encode(b"%PDF"))

    monkeypatch.setattr(cli, "render", fake_render)
    out = tmp_path / "out.pdf"
    assert cli.main(["--timeout", "5", "print", "https://example.com", "-o", str(out)]) == 0
    assert out.read_bytes() == b"%PDF"
    assert captured == {"source": "https://example.com", "timeout": 5.0}


def test_main_reports_protocol_errors(monkeypatch, tmp_path) -> None:  # noqa: ANN001
    from cdp_protocols.pdf import main as cli
    from cdp_protocols.pdf.steps import ProtocolError

    def failing_render(args, config):  # noqa: ANN001, ANN202, ARG001
        raise ProtocolError("print_to_pdf", "navigated", {"kind": "navigation_failed"})

    monkeypatch.setattr(cli, "render", failing_render)
    out = tmp_path / "out.pdf"
    assert cli.main(["print", "https://example.com", "-o", str(out)]) == 1
    assert not out.exists()


@pytest.fixture
def cli_browser(monkeypatch, scripted_page):  # noqa: ANN001, ANN201
    from cdp_protocols.pdf import main as cli

    for name in ("CDP_PDF_WS_URL", "CDP_PDF_CONSOLE_API_CALLS", "CDP_PDF_RUNTIME_EXCEPTIONS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "browser_ws_url", lambda host, port: f"ws://{host}:{port}/devtools/browser/b")
    monkeypatch.setattr(cli, "CdpConnection", lambda ws_url: scripted_page)
    return scripted_page


def _sent(browser, method):  # noqa: ANN001, ANN202
    return [call for call, _ in browser.calls if call.method == method]


def test_render_print_html_file_with_page_options(cli_browser, tmp_path) -> None:  # noqa: ANN001
    from cdp_protocols.pdf import main as cli

    page = tmp_path / "page.html"
    page.write_text("<h1>report</h1>", encoding="utf-8")
    out = tmp_path / "out.pdf"

    code = cli.main(
        [
            "--timeout", "1",
            "print", "--html", str(page), "-o", str(out),
            "--landscape", "--background", "--offline",
            "--wait-for", "#chart", "data-rendered",
        ]
    )

    assert code == 0
    assert out.read_bytes() == b"%PDF-1.7 fake"
    assert _sent(cli_browser, "Page.setDocumentContent")[0].params == {"html": "<h1>report</h1>", "frameId": "F1"}
    assert _sent(cli_browser, "Page.printToPDF")[0].params == {"landscape": True, "printBackground": True}
    offline = _sent(cli_browser, "Network.emulateNetworkConditions")[0]
    assert offline.params["offline"] is True
    assert offline.session_id == "S1"
    expression = _sent(cli_browser, "Runtime.evaluate")[0].params["expression"]
    assert '"#chart"' in expression
    assert '"data-rendered"' in expression
    assert all(call.params == {"url": "about:blank"} for call in _sent(cli_browser, "Page.navigate"))
    assert cli_browser.closed


def test_render_screenshot_of_url(cli_browser, tmp_path) -> None:  # noqa: ANN001
    from cdp_protocols.pdf import main as cli

    out = tmp_path / "shot.png"
    assert cli.main(["--timeout", "1", "screenshot", "https://example.com", "-o", str(out)]) == 0

    assert out.read_bytes() == b"%PDF-1.7 fake"
    assert _sent(cli_browser, "Page.navigate")[0].params == {"url": "https://example.com"}
    assert _sent(cli_browser, "Page.captureScreenshot")[0].params == {"format": "png"}
    assert "Page.printToPDF" not in cli_browser.methods
    assert "Network.emulateNetworkConditions" not in cli_browser.methods
    assert "Runtime.evaluate" not in cli_browser.methods


def test_render_uses_explicit_ws_url(cli_browser, monkeypatch, tmp_path) -> None:  # noqa: ANN001
    from cdp_protocols.pdf import main as cli

    seen: list[str] = []

    def connect(ws_url: str):  # noqa: ANN202
        seen.append(ws_url)
        return cli_browser

    def no_discovery(host, port):  # noqa: ANN001, ANN202
        raise AssertionError("discovery should be skipped")

    monkeypatch.setattr(cli, "CdpConnection", connect)
    monkeypatch.setattr(cli, "browser_ws_url", no_discovery)
    out = tmp_path / "out.pdf"
    argv = ["--ws-url", "ws://h:1/devtools/browser/x", "--timeout", "1", "print", "https://e.com", "-o", str(out)]
    assert cli.main(argv) == 0
    assert seen == ["ws://h:1/devtools/browser/x"]


def test_main_reports_transport_errors(monkeypatch, tmp_path) -> None:  # noqa: ANN001
    from cdp_protocols.pdf import main as cli
    from cdp_protocols.pdf.session_cdp import TransportError

    def unreachable(host, port):  # noqa: ANN001, ANN202
        raise TransportError("connection refused")

    monkeypatch.delenv("CDP_PDF_WS_URL", raising=False)
    monkeypatch.setattr(cli, "browser_ws_url", unreachable)
    assert cli.main(["print", "https://example.com", "-o", str(tmp_path / "out.pdf")]) == 2
