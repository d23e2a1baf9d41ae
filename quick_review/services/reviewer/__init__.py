"""Reviewer service: agent loop, tools and orchestration."""
