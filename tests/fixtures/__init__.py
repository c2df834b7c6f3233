"""Test fixtures for the UIGen agent.

This package provides reusable test fixtures:
- file_trees: FileTree builders and sample snapshots
- model: Scripted model clients and canned model responses
- api: TestClient wiring with injected model and project store
"""
