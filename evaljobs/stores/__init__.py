"""Side-effecting stores used during discovery."""

from .gc_roots import RootRegistrar, RootRegistrationError, RootStore, SymlinkRootStore

__all__ = ["RootRegistrar", "RootRegistrationError", "RootStore", "SymlinkRootStore"]
