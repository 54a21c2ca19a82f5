"""Reporting app: revenue aggregation, commission and calendar reports."""
