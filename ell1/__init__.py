from ell1.analysis import ChoicePoint, Conflict
from ell1.engine import Engine
from ell1.errors import ECFGError, QueryError, ValidationError
from ell1.expression import ALT, GROUP_CLOSE, GROUP_OPEN, REPEAT_CLOSE, REPEAT_OPEN
from ell1.grammar import EOF, EPS, MATH_NA, Alternative, Grammar, Production

__all__ = [
    "ALT",
    "EOF",
    "EPS",
    "GROUP_CLOSE",
    "GROUP_OPEN",
    "MATH_NA",
    "REPEAT_CLOSE",
    "REPEAT_OPEN",
    "Alternative",
    "ChoicePoint",
    "Conflict",
    "ECFGError",
    "Engine",
    "Grammar",
    "Production",
    "QueryError",
    "ValidationError",
]
