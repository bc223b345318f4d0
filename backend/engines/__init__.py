"""Deterministic RIF engines: form model, visibility rules, scoring and review."""
