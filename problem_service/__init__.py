"""RFC 7807 problem details for FastAPI services.

Errors of any origin (explicit problems, arbitrary exceptions, validation
failures) are translated into one ``ProblemDetail`` model and rendered as
``application/problem+json`` or ``application/problem+xml`` depending on the
caller's Accept header.
"""

from problem_service.core.dispatcher import (
    ProblemDispatcher,
    ProblemResponse,
    ProblemResult,
    create_problem_response,
    create_problem_result,
)
from problem_service.core.exceptions import ProblemException
from problem_service.core.formatters import (
    PROBLEM_JSON_MEDIA_TYPE,
    PROBLEM_XML_MEDIA_TYPE,
    FormatterRegistry,
)
from problem_service.core.schemas.problem_details import ProblemDetail
from problem_service.core.translator import ProblemTranslator

__version__ = "1.0.0"

__all__ = [
    "PROBLEM_JSON_MEDIA_TYPE",
    "PROBLEM_XML_MEDIA_TYPE",
    "FormatterRegistry",
    "ProblemDetail",
    "ProblemDispatcher",
    "ProblemException",
    "ProblemResponse",
    "ProblemResult",
    "ProblemTranslator",
    "create_problem_response",
    "create_problem_result",
]
