import pytest

from conftest import FakeExecutor
from wpdeploy.dsl import sh
from wpdeploy.model import RunState
from wpdeploy.runner import Runner, StepFailure, get_result, shell_execute


def _three_steps(runner, *, guard2=True):
    runner.add(sh("cmd-1", "one done", "one failed"))
    runner.add(sh("cmd-2", "two done", "two failed"), when=guard2)
    runner.add(sh("cmd-3", "three done", "three failed"))


def test_false_guard_skips_step_silently(console, capsys):
    execute = FakeExecutor()
    runner = Runner(1, executor=execute, console=console)
    _three_steps(runner, guard2=False)

    result = runner.run()

    assert execute.calls == ["cmd-1", "cmd-3"]
    assert [r.status for r in result.records] == ["ok", "skipped", "ok"]
    assert result.ok and result.state == RunState.COMPLETED
    out = capsys.readouterr().out
    assert "one done" in out and "three done" in out
    assert "two" not in out


def test_failure_aborts_the_pipeline(console, capsys):
    execute = FakeExecutor([("cmd-2", (3, "boom\n"))])
    runner = Runner(1, executor=execute, console=console)
    _three_steps(runner)

    result = runner.run()

    assert execute.calls == ["cmd-1", "cmd-2"]
    assert result.state == RunState.ABORTED
    assert not result.ok
    assert result.failed.step.run == "cmd-2"
    assert result.failed.exit_code == 3
    assert runner.failure.exit_code == 3
    assert runner.failure.output == "boom\n"
    captured = capsys.readouterr()
    assert captured.err.count("two failed") == 1
    assert "three" not in captured.out


def test_failure_message_ignores_verbosity(console, capsys):
    runner = Runner(2, executor=FakeExecutor([("cmd-1", (1, ""))]), console=console)
    _three_steps(runner)
    runner.run()
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "one failed" in captured.err


def test_failure_without_message_prints_nothing(console, capsys):
    runner = Runner(1, executor=FakeExecutor([("rm", (1, ""))]), console=console)
    runner.add(sh("rm -f x"))
    result = runner.run()
    assert result.state == RunState.ABORTED
    assert capsys.readouterr().err == ""
    assert "rm -f x" in str(runner.failure)


def test_quiet_verbosity_prints_nothing_on_success(console, capsys):
    runner = Runner(2, executor=FakeExecutor(), console=console)
    _three_steps(runner)
    runner.run()
    captured = capsys.readouterr()
    assert captured.out == "" and captured.err == ""


def test_loud_verbosity_echoes_every_step(console, capsys):
    runner = Runner(0, executor=FakeExecutor([("cmd-3", (0, "some output\n"))]), console=console)
    runner.add(sh("cmd-1"))
    runner.add(sh("cmd-2", "two done"))
    runner.add(sh("cmd-3"))
    runner.run()

    lines = capsys.readouterr().out.splitlines()
    assert [l for l in lines if l.startswith("$ ")] == ["$ cmd-1", "$ cmd-2", "$ cmd-3"]
    assert "Success: two done" in lines
    assert "  some output" in lines


def test_pipeline_runs_once(console):
    runner = Runner(1, executor=FakeExecutor(), console=console)
    runner.add(sh("cmd-1"))
    runner.run()
    with pytest.raises(RuntimeError):
        runner.run()
    with pytest.raises(RuntimeError):
        runner.add(sh("cmd-2"))


def test_invalid_verbosity():
    with pytest.raises(ValueError):
        Runner(3)


def test_step_failure_str_prefers_message():
    assert str(StepFailure(cmd="x", exit_code=2, message="Nope.")) == "Nope."
    assert "exit=2" in str(StepFailure(cmd="x", exit_code=2))


def test_get_result_trims_and_hides_failures():
    execute = FakeExecutor([("hostname", (0, "  laptop\n")), ("false", (1, "err"))])
    assert get_result("hostname", execute) == "laptop"
    assert get_result("false", execute) == ""


def test_shell_execute_captures_output():
    code, output = shell_execute("echo hello; echo oops 1>&2; exit 4")
    assert code == 4
    assert "hello" in output and "oops" in output


def test_shell_execute_tolerates_undecodable_output():
    code, output = shell_execute("printf 'caf\\351.jpg\\n'")
    assert code == 0
    assert output == "caf\ufffd.jpg\n"


def test_executor_error_aborts_the_pipeline(console, capsys):
    def undecodable(cmd):
        raise UnicodeDecodeError("utf-8", b"\xe9", 0, 1, "invalid continuation byte")

    execute = FakeExecutor([("cmd-2", undecodable)])
    runner = Runner(1, executor=execute, console=console)
    _three_steps(runner)

    result = runner.run()

    assert result.state == RunState.ABORTED
    assert execute.calls == ["cmd-1", "cmd-2"]
    assert runner.failure.exit_code == -1
    assert "UnicodeDecodeError" in runner.failure.output
    assert "two failed" in capsys.readouterr().err


def test_get_result_returns_empty_when_the_executor_errors():
    def broken(cmd):
        raise OSError("no shell")

    assert get_result("hostname", FakeExecutor([("hostname", broken)])) == ""
