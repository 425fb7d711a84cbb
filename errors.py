class UtilsError(Exception):
    """Fatalní chyba příkazu, CLI ji vypíše na stderr a skončí s kódem 1."""


class NotFound(UtilsError):
    pass


class ParseError(UtilsError):
    pass


class SchemaViolation(UtilsError):
    pass


class IoError(UtilsError):
    pass


class InvalidArgument(UtilsError):
    pass


class AlreadyExists(UtilsError):
    pass


class BuildFailed(UtilsError):
    pass
