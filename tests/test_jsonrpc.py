from __future__ import annotations

import threading

from cdp_protocols.pdf import jsonrpc


def test_response_classification() -> None:
    msg = {"id": 7, "result": {}}
    assert jsonrpc.is_response(msg, 7)
    assert not jsonrpc.is_response(msg, 8)
    assert not jsonrpc.is_response({"id": 7}, 7)
    assert not jsonrpc.is_response(msg, None)
    assert not jsonrpc.is_response("nope", 7)


def test_notification_classification() -> None:
    event = {"method": "Page.loadEventFired", "params": {}}
    assert jsonrpc.is_notification(event, "Page.loadEventFired")
    assert not jsonrpc.is_notification(event, "Page.frameStoppedLoading")
    assert not jsonrpc.is_notification({"id": 1, "method": "Page.loadEventFired"}, "Page.loadEventFired")


def test_extract_error_is_structured() -> None:
    msg = {"id": 3, "error": {"code": -32000, "message": "No target with given id"}}
    assert jsonrpc.is_error(msg)
    assert jsonrpc.extract_error(msg) == {
        "kind": "response_error",
        "code": -32000,
        "message": "No target with given id",
    }
    assert jsonrpc.extract_error({"id": 3, "error": "boom"}) == {"kind": "response_error", "message": "boom"}


def test_call_id_generator_is_unique_across_threads() -> None:
    gen = jsonrpc.CallIdGenerator()
    seen: list[int] = []
    lock = threading.Lock()

    def worker() -> None:
        ids = [gen() for _ in range(200)]
        with lock:
            seen.extend(ids)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(seen) == len(set(seen)) == 800
    assert min(seen) == 1
