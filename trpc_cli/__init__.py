"""
trpc-cli: a typed async client and command line for the Transmission JSON RPC daemon.
"""

__version__ = "0.1.0"
