class LoaderError(Exception):
    """Base class for problems confined to one import unit."""


class MissingInputError(LoaderError):
    """An index file, folder or referenced edition is absent."""


class DuplicateUnitError(LoaderError):
    """The edition or tournament is already stored and overwrite is off."""


class BonusValidationError(LoaderError):
    """Difficulty modifiers of a bonus are missing or inconsistent."""


class UnresolvedReferenceError(LoaderError):
    """A game record points at a packet, question or game that is not loaded."""
