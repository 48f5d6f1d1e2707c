"""Ledgerly: invoices, purchase orders and user roles for small businesses."""

__version__ = "0.1.0"


def __getattr__(name):
    # cli.main imports every command module, so it is only loaded on first use
    if name == "main":
        from ledgerly.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
