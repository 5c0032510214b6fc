"""
Test suite for gleaner

- Unit tests for formatting, registry, rules and the loading shim
- Driver tests against fake host engines and repositories
- End-to-end tests over YAML build descriptions and the CLI
"""
