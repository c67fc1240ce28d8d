"""Stat rules for pet actions.

Pure functions of (user, pet, action input) -> new state or a rejection.
Nothing in here touches redis or FastAPI, so the dispatcher, tests and any
future CLI all evaluate the same rules.
"""
