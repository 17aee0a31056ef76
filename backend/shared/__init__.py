"""
Shared module for common utilities used by the REST API.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Limits, reserved query parameters, enums, messages

- shared.infrastructure: Database and request context
  - db.py: SQLAlchemy engine and sessions, safe_commit()
  - correlation.py: X-Request-ID propagation into logs

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - schemas.py: Pydantic payload/output schemas

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import Limits, QueryParams
    from shared.utils.exceptions import NotFoundError, BadRequestError
"""
