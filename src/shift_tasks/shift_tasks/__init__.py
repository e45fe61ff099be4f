"""Shift Tasks package.

Task lifecycle and shift reporting for a multi-site station operation, organized
by feature modules (tasks, users, positions, cards, ranking) with a thin Flask
JSON controller layer over service/repository layers.
"""
