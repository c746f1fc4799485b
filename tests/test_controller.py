"""Tests for the stream controller: live rendering, draining and cancellation."""

import asyncio
import logging

import pytest

from tgo.config import ReportConfig
from tgo.controller import RunState, StreamController
from tgo.events import ALL_STATUSES, Key, Status, Verbosity
from tgo.reporting import Reporter

from .conftest import CapturedConsole, failing_test, json_line, make_event, passing_test


def make_controller(captured: CapturedConsole, **config) -> StreamController:
    report_config = ReportConfig(**config)
    return StreamController(report_config, Reporter(captured.console, report_config.verbosity))


def feed_all(controller: StreamController, events) -> None:
    for event in events:
        controller.feed(event)


class TestIngest:
    def test_malformed_line_is_skipped(self, captured, caplog):
        controller = make_controller(captured)

        with caplog.at_level(logging.WARNING, logger="tgo.controller"):
            controller.feed_line(json_line("run", test="TestX"))
            assert controller.feed_line("{not json\n") is None
            controller.feed_line(json_line("pass", test="TestX", elapsed=0.1))

        assert len(controller.store.get(Key("demo", "TestX"))) == 2
        assert controller.decode_errors == 1
        assert "Skipping undecodable line" in caplog.text

    def test_failure_printed_as_soon_as_it_is_known(self, captured):
        controller = make_controller(captured)
        events = failing_test("TestFail")

        feed_all(controller, events[:-1])
        assert captured.text == ""

        assert controller.feed(events[-1]) is True
        assert captured.lines[0] == "═══ FAIL demo.TestFail"

    def test_unwanted_status_not_printed(self, captured):
        controller = make_controller(captured)

        feed_all(controller, passing_test("TestOK"))

        assert captured.text == ""
        assert Key("demo", "TestOK") not in controller.rendered

    def test_rendered_at_most_once(self, captured):
        controller = make_controller(captured, results=ALL_STATUSES)

        feed_all(controller, passing_test("TestTwice"))
        controller.feed(make_event("pass", test="TestTwice"))
        controller.feed(make_event("fail", test="TestTwice"))

        assert captured.text.count("demo.TestTwice") == 1

    def test_later_failure_is_rendered(self, captured):
        controller = make_controller(captured)
        feed_all(controller, [
            make_event("run", test="TestX"),
            make_event("pass", test="TestX"),
            make_event("output", test="TestX", output="    x_test.go:3: late failure\n"),
        ])
        assert captured.text == ""

        assert controller.feed(make_event("fail", test="TestX")) is True
        controller.drain()

        assert Key("demo", "TestX") in controller.rendered
        assert captured.lines[0] == "═══ PASS demo.TestX [multiple results]"
        assert "    x_test.go:3: late failure" in captured.lines
        assert "  FAIL demo.TestX  [multiple results]" in captured.lines

    def test_feed_after_drain_is_rejected(self, captured):
        controller = make_controller(captured)
        controller.drain()

        with pytest.raises(RuntimeError):
            controller.feed(make_event("run", test="TestLate"))


class TestDrain:
    def test_unfinished_tests_printed_at_drain(self, captured):
        controller = make_controller(captured)
        feed_all(controller, [make_event("run", test="TestHang")])
        assert captured.text == ""

        controller.drain()

        assert captured.lines[0] == "═══ NONE demo.TestHang"

    def test_every_wanted_key_rendered_exactly_once(self, captured):
        controller = make_controller(captured, results=ALL_STATUSES, summary=())
        feed_all(controller, [
            *passing_test("TestA"),
            *failing_test("TestB"),
            make_event("run", test="TestC"),
            make_event("skip", test="TestD"),
            make_event("output", "demo", output="FAIL\n"),
            make_event("fail", "demo"),
        ])

        controller.drain()

        assert controller.rendered == controller.store.keys()
        for name in ("demo.TestA", "demo.TestB", "demo.TestC", "demo.TestD"):
            assert captured.text.count(f"{name}\n") + captured.text.count(f"{name} ") == 1

    def test_drain_order(self, captured):
        controller = make_controller(captured, results=(Status.NONE,), summary=())
        feed_all(controller, [
            make_event("run", "a", "T10"),
            make_event("run", "a", "T2"),
            make_event("output", "a", output="FAIL\n"),
            make_event("run", "a", "T1"),
        ])

        controller.drain()

        headers = [line for line in captured.lines if line.startswith("═══ ")]
        assert headers == ["═══ NONE a.T1", "═══ NONE a.T2", "═══ NONE a.T10", "═══ NONE a"]

    def test_summaries_and_footer(self, captured):
        controller = make_controller(captured, results=())
        feed_all(controller, [
            *failing_test("TestB"),
            *passing_test("TestA"),
            make_event("output", "util", output="ok  \tutil\t0.002s\n"),
        ])

        tally = controller.drain()

        text = captured.text
        assert "════════════ FAIL [1] ════════════" in text
        assert "  FAIL demo.TestB" in text
        assert "════════════ NONE [1] ════════════" in text
        assert "  NONE util" in text
        assert "| PASS:1 | FAIL:1 | NONE:1 | SKIP:0 |" in captured.lines[-1]
        assert tally.failed == 1
        assert controller.state == RunState.DONE
        assert controller.tally is tally

    def test_package_without_result_only_in_none_summary(self, captured):
        controller = make_controller(captured, results=(), summary=ALL_STATUSES)
        controller.feed(make_event("output", "util", output="ok  \tutil\t0.002s\n"))

        controller.drain()

        assert "════════════ NONE [1]" in captured.text
        for status in ("PASS", "FAIL", "SKIP", "BENCH"):
            assert f"════════════ {status} " not in captured.text

    def test_skip_summary_hides_packages_without_tests(self, captured):
        controller = make_controller(captured, results=(), summary=(Status.SKIP,))
        feed_all(controller, [
            make_event("output", "empty", output="?   \tempty\t[no test files]\n"),
            make_event("skip", "empty"),
            make_event("skip", "demo", "TestSkipped"),
        ])

        controller.drain()

        assert "════════════ SKIP [1]" in captured.text
        assert "empty" not in captured.text.split("════════════ SKIP")[1]

    def test_skip_summary_lists_packages_without_tests_at_high_verbosity(self, captured):
        controller = make_controller(captured, results=(), summary=(Status.SKIP,), verbosity=Verbosity.V4)
        feed_all(controller, [
            make_event("output", "empty", output="?   \tempty\t[no test files]\n"),
            make_event("skip", "empty"),
        ])

        controller.drain()

        assert "  SKIP empty  [no tests]" in captured.text

    def test_coverage_listing_when_enabled(self, captured):
        controller = make_controller(captured, results=(), coverage=True)
        feed_all(controller, [
            make_event("output", "util", output="coverage: 87.5% of statements\n"),
            make_event("pass", "util"),
        ])

        controller.drain()

        assert " 87.5% util" in captured.lines

    def test_empty_run_prints_nothing(self, captured):
        controller = make_controller(captured)

        tally = controller.drain()

        assert captured.text == ""
        assert tally.failed == 0

    def test_drain_twice_is_rejected(self, captured):
        controller = make_controller(captured)
        controller.drain()

        with pytest.raises(RuntimeError):
            controller.drain()

    def test_has_failures(self, captured):
        controller = make_controller(captured)
        feed_all(controller, passing_test("TestA"))
        assert not controller.has_failures

        feed_all(controller, failing_test("TestB"))
        assert controller.has_failures


class TestConsume:
    @pytest.mark.asyncio
    async def test_consumes_until_end_of_input(self, captured):
        controller = make_controller(captured)

        async def lines():
            yield json_line("run", test="TestX")
            yield "garbage\n"
            yield json_line("fail", test="TestX")

        await controller.consume(lines())

        assert controller.store.status(Key("demo", "TestX")) == Status.FAIL
        assert controller.decode_errors == 1
        assert not controller.cancelled

    @pytest.mark.asyncio
    async def test_cancel_stops_a_hanging_stream(self, captured):
        controller = make_controller(captured)
        cancel = asyncio.Event()

        async def lines():
            yield json_line("run", test="TestA")
            yield json_line("pass", test="TestA")
            yield json_line("run", test="TestB")
            await asyncio.Event().wait()
            yield json_line("pass", test="TestB")

        task = asyncio.create_task(controller.consume(lines(), cancel))
        await asyncio.sleep(0.05)
        cancel.set()
        await asyncio.wait_for(task, timeout=1.0)

        assert controller.cancelled
        assert len(controller.store) == 2

        controller.drain()
        assert "═══ NONE demo.TestB" in captured.text

    @pytest.mark.asyncio
    async def test_already_cancelled(self, captured):
        controller = make_controller(captured)
        cancel = asyncio.Event()
        cancel.set()

        async def lines():
            yield json_line("run", test="TestA")

        await controller.consume(lines(), cancel)

        assert controller.cancelled
        assert len(controller.store) == 0
