"""
Exception taxonomy for player supervision
"""

# Message prefix registries use to say a player is permanently gone
NOT_FOUND_PREFIX = "player not found"


class PlayerError(Exception):
    """Base class for player supervision errors"""


class NoPlayerAvailable(PlayerError):
    """No player process is bound, or the registry has none to offer"""

    def __init__(self, message="no player process is available"):
        super().__init__(message)


class PlayerNotFound(PlayerError):
    """The registry no longer knows about a player"""

    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__(f"{NOT_FOUND_PREFIX}: {player_id}")


class PlayerCommandError(PlayerError):
    """A new player process could not be launched"""


class OperationTimeout(PlayerError, TimeoutError):
    """A bounded wait elapsed before the operation finished"""


class ConfigError(ValueError):
    """Invalid supervisor configuration"""
