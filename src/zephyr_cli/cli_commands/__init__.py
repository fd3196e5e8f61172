"""Command groups, one module per Zephyr resource; each exposes ``register(cli)``."""
