class FormulaError(Exception):
    """Base class for every failure raised while evaluating a formula."""


class TokenizerError(FormulaError):
    pass


class ParseError(FormulaError):
    pass


class CoercionError(FormulaError):
    """Raised when a value cannot be converted to a number."""


class InvalidCellRange(FormulaError):
    pass