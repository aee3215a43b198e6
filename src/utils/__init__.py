"""
Generic utility functions shared across modules.

Includes the environment lookup abstraction, duration parsing, network
address validation and logging setup.
"""
