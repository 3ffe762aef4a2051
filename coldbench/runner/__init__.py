"""Benchmark runner internals.

Modules:
- constants: binary names, axis values, command template, hook commands
- types: dataclasses for Scenario, Axis, GridCell and run configuration
- grid: axis construction, cartesian expansion, template instantiation
- hooks: cache-wipe / fixture-restore hook commands
- engine: hyperfine invocation
- prepare: environment setup before any measurement
- exec: core orchestration logic
"""
