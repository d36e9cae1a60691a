"""Error handling for faultcase.

- ErrorCode: Standard codes for schema misuse
- SchemaError/SchemaException: Structured misuse errors and the exception raising them
- Result/Ok/Err: The binary result type labeled unions interoperate with
"""

from .errors import ErrorCode, SchemaError, SchemaException, misuse
from .result import Err, Ok, Result

__all__ = [
    # Misuse errors
    "ErrorCode", "SchemaError", "SchemaException", "misuse",
    # Binary result
    "Result", "Ok", "Err",
]
