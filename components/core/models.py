"""Registry of every table module so metadata is complete before use."""


def register_models() -> None:
    """Import all model modules; they register themselves on Base."""
    import components.obligation.models  # noqa: F401
    import components.source_period.models  # noqa: F401
    import components.transaction.models  # noqa: F401
    import components.period.models  # noqa: F401
    import components.summary.models  # noqa: F401
