"""
multisig — multi-party transaction approval gateway.

A fixed set of owners submits, confirms and executes outgoing actions once a
confirmation threshold is reached. Pause gating and role-gated upgrades of the
logic module complete the lifecycle.

This package exposes only lightweight metadata at import time. Import the wallet
facade explicitly:

    from multisig.wallet import MultisigWallet
"""

from .version import __version__, git_describe

__all__ = ["__version__", "git_describe"]
