"""
Entries Module - Black Box Interface

Purpose: Per-user journal entry storage
Interface: save_entry(), list_entries(), delete_entry()
Hidden: Key layout, JSON encoding, legacy record handling

Every operation takes the owner's username from verified token claims;
ownership is enforced purely by the key prefix.
"""

from .entries import EntryModule

__all__ = ["EntryModule"]
