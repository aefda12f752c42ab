# agirace/errors.py

class AgiRaceError(Exception):
    pass

class ConfigurationError(AgiRaceError):
    """Static game data is broken. Raised at construction or lookup, never mid-turn."""

class UnknownActionError(ConfigurationError, KeyError):
    def __init__(self, action_id: str):
        super().__init__(action_id)
        self.action_id = action_id

    def __str__(self) -> str:
        return f"unknown action id: {self.action_id!r}"

class MissingStrategyError(ConfigurationError):
    def __init__(self, faction_id: str):
        super().__init__(f"no strategy profile for faction {faction_id!r}")
        self.faction_id = faction_id

class CatalogError(ConfigurationError):
    pass

class SaveFormatError(AgiRaceError):
    pass
