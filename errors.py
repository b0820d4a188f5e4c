# errors.py


class HotspotAdvisorError(Exception):
    """Base class for hotspot advisor failures."""


class ConfigurationError(HotspotAdvisorError):
    """Rule resource missing or malformed. Fatal at startup, never retried."""


class CompileError(ConfigurationError):
    pass


class EvaluationFault(HotspotAdvisorError):
    """
    The evaluator found itself in an inconsistent state (e.g. a fact the
    rules need was never populated). This is an orchestration bug, not a
    data problem, so the current monitoring tick must be aborted.
    """


class EvaluationError(EvaluationFault):
    pass
