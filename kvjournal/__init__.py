"""
kvjournal - Personal Journal Backend

A small journal service: users register with a client-side password digest,
log in for a signed bearer token, and keep private entries in a key-value
store.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- auth: Registration, login, token signing and verification
- entries: Journal entry storage
- storage: Key-value backend abstraction
- config: Environment configuration
- api: Request/response models
"""

__version__ = "1.0.0"
