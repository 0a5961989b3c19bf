"""
Test suite for task-sync.

Unit tests for the merge engine, its reconcilers and field rules, plus
file-level tests for snapshot import/export and the CLI.
"""
