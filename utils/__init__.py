"""
Shared helpers: deterministic DAG ordering and console rendering.
"""
