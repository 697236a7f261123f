"""Overtime System package.

Feature modules (overtime, notifications, stats, ...) sit behind a thin Flask
controller layer; business rules live in service/repository layers.
"""
