"""Client side of the Factom entry protocol used for anchor records."""

from anchorsvc.factom.compose import JSON2Request, JSON2Response, compose_entry_commit, compose_entry_reveal
from anchorsvc.factom.entry import Entry, new_entry
from anchorsvc.factom.keys import ECAddress, chain_id_from_hex, private_key_from_hex
from anchorsvc.factom.submitter import EntrySubmitter, SubmitResult

__all__ = [
    "ECAddress",
    "Entry",
    "EntrySubmitter",
    "JSON2Request",
    "JSON2Response",
    "SubmitResult",
    "chain_id_from_hex",
    "compose_entry_commit",
    "compose_entry_reveal",
    "new_entry",
    "private_key_from_hex",
]
