from __future__ import annotations

import pytest

from coldbench.run_benches import default_scenarios
from coldbench.runner import exec as runner_exec
from coldbench.runner.errors import BenchmarkError, ConfigError, RestoreError
from coldbench.runner.exec import Runner, select_scenarios
from coldbench.runner.grid import expand
from coldbench.runner.hooks import cleanup_hook, prepare_hook
from coldbench.runner.types import RunSettings, Scenario


def _cell_runner(bench_paths, engine, **kw) -> Runner:
    return Runner(bench_paths, RunSettings(expand="cell", **kw), engine=engine)


def test_cell_mode_brackets_every_measurement(bench_paths, make_engine, events) -> None:
    engine = make_engine()
    runner = _cell_runner(bench_paths, engine)
    scs = default_scenarios()

    total = runner.run(scs)

    expected = [cmd for sc in scs for _, cmd in expand(sc)]
    assert total == len(expected) == 12
    assert [c["command"] for c in engine.calls] == expected
    # prepare -> measure -> cleanup per cell, never interleaved
    assert len(events) == 3 * total
    for i in range(total):
        kinds = [kind for kind, _ in events[3 * i:3 * i + 3]]
        assert kinds == ["prepare", "measure", "cleanup"]


def test_cell_mode_hooks_target_the_cell_fixture(bench_paths, make_engine) -> None:
    engine = make_engine()
    sc = Scenario("python", "comments", "py", ("django", "pydantic"))
    _cell_runner(bench_paths, engine).run_scenario(sc)

    for call in engine.calls:
        fixture = "django" if "django/" in call["command"] else "pydantic"
        assert call["prepare"] == prepare_hook(fixture)
        assert call["cleanup"] == cleanup_hook(fixture)
        assert call["parameters"] == ()
        assert call["max_runs"] == 3
        assert call["cwd"] == bench_paths.bench_dir
    assert engine.calls[0]["command_name"] == "python-comments fixture=django find=e+ replace=_"


def test_prepare_hook_restores_then_wipes_caches() -> None:
    hook = prepare_hook("kubernetes")
    assert hook == ("git restore --recurse-submodules kubernetes && "
                    "(sync; echo 3 | sudo tee /proc/sys/vm/drop_caches)")
    assert cleanup_hook() == "git restore --recurse-submodules '{fixture}'"


def test_hooks_quote_fixture_paths_with_spaces() -> None:
    assert cleanup_hook("my repo") == "git restore --recurse-submodules 'my repo'"
    assert prepare_hook().startswith("git restore --recurse-submodules '{fixture}' && ")


def test_engine_mode_delegates_one_call_per_scenario(bench_paths, make_engine) -> None:
    engine = make_engine()
    runner = Runner(bench_paths, RunSettings(), engine=engine)

    total = runner.run(default_scenarios())

    assert total == 12
    assert len(engine.calls) == 2
    py = engine.calls[0]
    assert py["command"] == (
        "./srgn --fail-empty-glob --python comments --files '{fixture}/**/*.py' '{find}' '{replace}'"
    )
    assert [(ax.name, ax.values) for ax in py["parameters"]] == [
        ("fixture", ("django", "pydantic")),
        ("find", ("e+", "[Tt]he")),
        ("replace", ("_", "🙂")),
    ]
    assert py["prepare"] == prepare_hook()
    assert py["cleanup"] == cleanup_hook()


def test_cache_wipe_failure_stops_at_failing_cell(bench_paths, make_engine, recorded_restores) -> None:
    events = recorded_restores
    engine = make_engine(fail_at=2)
    runner = _cell_runner(bench_paths, engine)

    with pytest.raises(BenchmarkError) as exc:
        runner.run(default_scenarios())

    assert len(engine.calls) == 3
    assert exc.value.scenario == "python-comments"
    assert exc.value.cell == "fixture=django find=[Tt]he replace=_"
    # The failed cell still gets its fixture restored, after its prepare
    assert events[-2:] == [("prepare", prepare_hook("django")), ("restore", "django")]


def test_engine_mode_failure_restores_scenario_fixtures(bench_paths, make_engine, recorded_restores) -> None:
    events = recorded_restores
    engine = make_engine(fail_at=0, fail_rc=7)
    runner = Runner(bench_paths, RunSettings(), engine=engine)

    with pytest.raises(BenchmarkError) as exc:
        runner.run(default_scenarios())

    assert exc.value.returncode == 7
    assert len(engine.calls) == 1
    assert events[1:] == [("restore", "django"), ("restore", "pydantic")]


def test_interrupted_run_leaves_no_resume_state(bench_paths, make_engine, recorded_restores) -> None:
    scs = default_scenarios()
    interrupted = make_engine(interrupt_at=5)
    with pytest.raises(KeyboardInterrupt):
        _cell_runner(bench_paths, interrupted).run(scs)
    assert len(interrupted.calls) == 6
    assert recorded_restores[-1] == ("restore", "pydantic")

    fresh = make_engine()
    total = _cell_runner(bench_paths, fresh).run(scs)
    assert total == 12
    assert len(fresh.calls) == 12


@pytest.mark.parametrize("max_runs", [0, 4])
def test_max_runs_is_bounded(bench_paths, make_engine, max_runs) -> None:
    with pytest.raises(ConfigError):
        Runner(bench_paths, RunSettings(max_runs=max_runs), engine=make_engine())


def test_unknown_expand_mode(bench_paths, make_engine) -> None:
    with pytest.raises(ConfigError):
        Runner(bench_paths, RunSettings(expand="parallel"), engine=make_engine())


def test_select_scenarios_filters_in_declared_order() -> None:
    scs = select_scenarios(default_scenarios(), ["go-comments", "python-comments"])
    assert [s.name for s in scs] == ["python-comments", "go-comments"]
    with pytest.raises(ConfigError):
        select_scenarios(default_scenarios(), ["rust-comments"])


def test_engine_mode_interrupt_restores_all_scenario_fixtures(bench_paths, make_engine, recorded_restores) -> None:
    engine = make_engine(interrupt_at=0)
    runner = Runner(bench_paths, RunSettings(), engine=engine)

    with pytest.raises(KeyboardInterrupt):
        runner.run(default_scenarios())

    assert len(engine.calls) == 1
    assert recorded_restores[1:] == [("restore", "django"), ("restore", "pydantic")]


def test_restore_failure_after_failed_cell_aborts_run(bench_paths, make_engine, monkeypatch) -> None:
    def broken_restore(bench_dir, fixture):
        raise RestoreError(fixture, 128)

    monkeypatch.setattr(runner_exec, "restore", broken_restore)
    engine = make_engine(fail_at=1)

    with pytest.raises(RestoreError) as exc:
        _cell_runner(bench_paths, engine).run(default_scenarios())

    assert exc.value.fixture == "django"
    assert len(engine.calls) == 2


def test_interrupt_wins_over_failed_restore(bench_paths, make_engine, monkeypatch, capsys) -> None:
    def broken_restore(bench_dir, fixture):
        raise RestoreError(fixture, 1)

    monkeypatch.setattr(runner_exec, "restore", broken_restore)
    engine = make_engine(interrupt_at=0)

    with pytest.raises(KeyboardInterrupt):
        _cell_runner(bench_paths, engine).run(default_scenarios())

    assert "restoring fixture 'django' exited with 1" in capsys.readouterr().err
