"""Coordinator: worker registry, job partitioning, dispatch and orchestration."""
