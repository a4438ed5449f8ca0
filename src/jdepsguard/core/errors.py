class ConfigError(ValueError):
    """Raised when the rule configuration contains an invalid value."""


class InvalidIdentifierError(ConfigError):
    """Raised when a rule's dependent or dependency is not a valid identifier."""


class RuleConflictError(ConfigError):
    """Raised when two rules share the same dependent and dependency."""
