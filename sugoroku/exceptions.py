"""
Custom exception hierarchy for the Sugoroku engine and its collaborators.

Expected game conditions (not enough money, hand full, ...) are never
raised; they come back as ``Reason`` values on result objects. These
exceptions cover programming and integrity errors only.
"""


class SugorokuError(Exception):
    """Base exception for all engine errors."""


class ContentError(SugorokuError):
    """A content catalog is malformed or references unknown ids."""


class InvalidActionError(SugorokuError):
    """A driver answered a decision that is not pending or not offered."""


class PersistenceError(SugorokuError):
    """Stored save data could not be decoded."""
