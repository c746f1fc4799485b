"""Tests for line sources and run supervision."""

import asyncio
import io
import os
import signal
import sys
import threading

import pytest

from tgo.config import ReportConfig
from tgo.controller import RunState, StreamController
from tgo.events import Key, Status
from tgo.reporting import Reporter
from tgo.sources import (
    ProducerExit,
    SourceError,
    StreamSource,
    SubprocessSource,
    create_source,
)
from tgo.supervisor import install_signal_handlers, remove_signal_handlers, supervise

from .conftest import CapturedConsole, FakeSource, json_line

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs an executable script")


def make_controller(captured: CapturedConsole) -> StreamController:
    return StreamController(ReportConfig(), Reporter(captured.console))


def fake_go(tmp_path, body: str):
    """An executable standing in for the go binary."""
    script = tmp_path / "fakego"
    script.write_text(f"#!{sys.executable}\nimport json, sys, time\n{body}\n")
    script.chmod(0o755)
    return str(script)


async def collect(source) -> list[str]:
    return [line async for line in source.lines()]


# ---------------------------------------------------------------------------
# StreamSource
# ---------------------------------------------------------------------------
class TestStreamSource:
    @pytest.mark.asyncio
    async def test_reads_stream(self):
        async with StreamSource(io.StringIO("one\ntwo\n")) as source:
            lines = await collect(source)
            code = await source.wait()

        assert lines == ["one\n", "two\n"]
        assert code is None

    @pytest.mark.asyncio
    async def test_reads_file(self, tmp_path):
        path = tmp_path / "out.json"
        path.write_text(json_line("run", test="TestX") + json_line("pass", test="TestX"))

        source = StreamSource(path)
        async with source:
            assert source.is_running
            lines = await collect(source)

        assert len(lines) == 2
        assert not source.is_running

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(SourceError, match="Cannot open"):
            async with StreamSource(tmp_path / "missing.json"):
                pass

    @posix_only
    @pytest.mark.asyncio
    async def test_open_pipe_read_without_worker_thread(self):
        read_fd, write_fd = os.pipe()
        os.write(write_fd, b"one\n")
        threads = threading.active_count()
        source = StreamSource(os.fdopen(read_fd, "r"))
        try:
            async with source:
                lines = source.lines()
                assert await lines.__anext__() == "one\n"

                pending = asyncio.ensure_future(lines.__anext__())
                await asyncio.sleep(0.05)
                assert not pending.done()
                pending.cancel()
                with pytest.raises(asyncio.CancelledError):
                    await pending

            assert not source.is_running
            assert threading.active_count() <= threads
        finally:
            os.close(write_fd)

    @pytest.mark.asyncio
    async def test_lines_before_start(self):
        assert await collect(StreamSource(io.StringIO("x\n"))) == []


# ---------------------------------------------------------------------------
# SubprocessSource
# ---------------------------------------------------------------------------
class TestSubprocessSource:
    def test_command(self):
        source = SubprocessSource(["-run", "TestX", "./..."], bin="go1.22")
        assert source.command == ["go1.22", "test", "-json", "-run", "TestX", "./..."]
        assert not source.is_running
        assert source.returncode is None

    @pytest.mark.asyncio
    async def test_missing_binary(self, tmp_path):
        source = SubprocessSource(bin=str(tmp_path / "no-such-go"))

        with pytest.raises(SourceError, match="Command not found"):
            await source.start()

    @posix_only
    @pytest.mark.asyncio
    async def test_reads_output_and_exit_code(self, tmp_path):
        bin = fake_go(tmp_path, "print(json.dumps({'Action': 'output', 'Output': ' '.join(sys.argv[1:])}))\nsys.exit(3)")

        async with SubprocessSource(["./..."], bin=bin) as source:
            lines = await collect(source)
            code = await source.wait()

        assert len(lines) == 1
        assert '"test -json ./..."' in lines[0]
        assert code == 3

    @posix_only
    @pytest.mark.asyncio
    async def test_stop_terminates(self, tmp_path):
        bin = fake_go(tmp_path, "time.sleep(30)")
        source = SubprocessSource(bin=bin)

        await source.start()
        assert source.is_running
        await source.stop()

        assert not source.is_running
        assert source.returncode is not None


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------
class TestCreateSource:
    def test_subprocess(self):
        source = create_source(ReportConfig(bin="go1.22"), ["./..."])

        assert isinstance(source, SubprocessSource)
        assert source.command[0] == "go1.22"

    def test_replay(self):
        assert isinstance(create_source(ReportConfig(), replay="out.json"), StreamSource)

    def test_replay_with_args(self):
        with pytest.raises(ValueError):
            create_source(ReportConfig(), ["./..."], replay="out.json")


# ---------------------------------------------------------------------------
# Supervision
# ---------------------------------------------------------------------------
class NeverExits(FakeSource):
    async def wait(self):
        await asyncio.Event().wait()


class BrokenSource(FakeSource):
    async def start(self):
        raise SourceError("cannot start")


class TestSupervise:
    @pytest.mark.asyncio
    async def test_success(self, captured):
        controller = make_controller(captured)
        source = FakeSource([json_line("run", test="TestA"), json_line("pass", test="TestA")])

        code = await supervise(controller, source)

        assert code == 0
        assert source.stopped
        assert controller.state == RunState.DONE
        assert "| PASS:1 |" in captured.text

    @pytest.mark.asyncio
    async def test_non_zero_exit_after_drain(self, captured):
        controller = make_controller(captured)
        source = FakeSource([json_line("fail", test="TestA")], exit_code=1)

        with pytest.raises(ProducerExit) as exc_info:
            await supervise(controller, source)

        assert exc_info.value.code == 1
        assert controller.state == RunState.DONE
        assert "═══ FAIL demo.TestA" in captured.text
        assert "| FAIL:1 |" in captured.text

    @pytest.mark.asyncio
    async def test_signal_exit_is_not_an_error(self, captured):
        controller = make_controller(captured)
        source = FakeSource([json_line("run", test="TestA")], exit_code=-15)

        assert await supervise(controller, source) == -15

    @pytest.mark.asyncio
    async def test_output_left_open_after_exit(self, captured):
        controller = make_controller(captured)
        source = FakeSource([json_line("run", test="TestA")], hang=True)

        code = await asyncio.wait_for(supervise(controller, source, grace_period=0.05), timeout=2.0)

        assert code == 0
        assert controller.cancelled
        assert "═══ NONE demo.TestA" in captured.text

    @pytest.mark.asyncio
    async def test_cancel_while_running(self, captured):
        controller = make_controller(captured)
        source = NeverExits([json_line("run", test="TestA"), json_line("pass", test="TestA")], hang=True)
        cancel = asyncio.Event()

        task = asyncio.create_task(supervise(controller, source, cancel))
        await asyncio.sleep(0.05)
        cancel.set()
        code = await asyncio.wait_for(task, timeout=2.0)

        assert code is None
        assert source.stopped
        assert controller.cancelled
        assert controller.store.status(Key("demo", "TestA")) == Status.PASS
        assert controller.state == RunState.DONE

    @pytest.mark.asyncio
    async def test_start_failure_still_drains(self, captured):
        controller = make_controller(captured)

        with pytest.raises(SourceError):
            await supervise(controller, BrokenSource([]))

        assert controller.state == RunState.DONE

    @posix_only
    @pytest.mark.asyncio
    async def test_end_to_end_with_process(self, tmp_path, captured):
        body = "\n".join([
            f"sys.stdout.write({json_line('run', test='TestA')!r})",
            f"sys.stdout.write({json_line('output', test='TestA', output='    a_test.go:3: nope' + chr(10))!r})",
            f"sys.stdout.write({json_line('fail', test='TestA', elapsed=0.2)!r})",
            "sys.exit(1)",
        ])
        controller = make_controller(captured)
        source = SubprocessSource(bin=fake_go(tmp_path, body))

        with pytest.raises(ProducerExit) as exc_info:
            await supervise(controller, source)

        assert exc_info.value.code == 1
        assert captured.lines[:3] == ["═══ FAIL demo.TestA (0.20s)", "", "    a_test.go:3: nope"]


class TestSignalHandlers:
    @pytest.mark.asyncio
    async def test_install_and_remove(self):
        cancel = asyncio.Event()

        installed = install_signal_handlers(cancel)
        try:
            if sys.platform != "win32":
                assert signal.SIGINT in installed
        finally:
            remove_signal_handlers(installed)

        assert not cancel.is_set()
