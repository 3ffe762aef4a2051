from pathlib import Path

# Tool under test (cargo package) -> staged binary name
TOOL_BIN_NAME = "srgn"

ENGINE_BIN_NAME = "hyperfine"

BENCH_DIR_NAME = "benches"

# Relative to the repo root
RELEASE_DIR = Path("target") / "release"

# Repetitions per grid cell; cold-cache runs are expensive
MAX_RUNS = 3

# Shared literal axes, combined with every scenario's fixture set
FIND_VALUES = ("e+", "[Tt]he")
REPLACE_VALUES = ("_", "🙂")

# Axis name -> placeholder used in templates and engine parameter lists
FIXTURE_AXIS = "fixture"
FIND_AXIS = "find"
REPLACE_AXIS = "replace"
AXIS_NAMES = (FIXTURE_AXIS, FIND_AXIS, REPLACE_AXIS)

# Scenario fields bound before the engine sees the template
SCENARIO_FIELDS = ("language", "query_type", "file_suffix")

# One argv token per entry; placeholders are bound per scenario / per grid cell
COMMAND_TEMPLATE = (
    "./{tool}",
    "--fail-empty-glob",
    "--{language}",
    "{query_type}",
    "--files",
    "{fixture}/**/*.{file_suffix}",
    "{find}",
    "{replace}",
)

# https://www.kernel.org/doc/Documentation/sysctl/vm.txt
WIPE_CACHES = "sync; echo 3 | sudo tee /proc/sys/vm/drop_caches"

RESTORE_ARGV = ("git", "restore", "--recurse-submodules")
