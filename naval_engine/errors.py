"""Exceptions raised by the naval turn-resolution engine."""


class NavalEngineError(Exception):
    """Base exception for all engine errors. context holds the ids or parser error behind it."""

    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})

    def __str__(self):
        if not self.context:
            return self.message
        ids = " ".join(f"{key}={self.context[key]}" for key in sorted(self.context))
        return f"{self.message} [{ids}]"


class ConfigError(NavalEngineError):
    """Rules file exists but cannot be used."""
    pass


class EntityNotFoundError(NavalEngineError):
    """A unit, structure, player or job id did not resolve."""
    pass


class SnapshotError(NavalEngineError):
    """Saved game snapshot is malformed."""
    pass


# Encounter contract violations
class EncounterError(NavalEngineError):
    """Errors related to encounter decision intake."""
    pass


class EncounterNotFoundError(EncounterError):
    """Decision submitted against an unknown encounter."""
    pass


class EncounterResolvedError(EncounterError):
    """Decision submitted against an encounter that is already resolved."""
    pass


class UnitNotInEncounterError(EncounterError):
    """Decision submitted for a unit that is not party to the encounter."""
    pass


class WrongEncounterTypeError(EncounterError):
    """PASSING decision recorded on an ENTRY encounter or vice versa."""
    pass
