"""
Runtime Environment Validation Module

This module validates environment variables at application startup.
If validation fails, the application will refuse to start (hard fail).

Placeholder backend credentials are NOT a failure: the application starts in
fallback mode and serves the in-memory store, but the condition is reported.
"""

import sys
from typing import Optional

from pydantic import ValidationError

from immogest.core.config import Settings

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _fail(message: str, hint: Optional[str] = None) -> None:
    print(f"❌ FATAL: {message}", file=sys.stderr)
    if hint:
        print(f"   {hint}", file=sys.stderr)
    sys.exit(1)


def validate_environment(settings: Optional[Settings] = None) -> Settings:
    """
    Validate environment variables at startup.

    Returns:
        Settings: Validated settings object

    Raises:
        SystemExit: If validation fails (exit code 1)
    """
    try:
        settings = settings or Settings()
    except ValidationError as e:
        print("❌ FATAL: Environment validation failed", file=sys.stderr)
        print("\nMissing or invalid environment variables:", file=sys.stderr)
        for error in e.errors():
            field = " -> ".join(str(loc) for loc in error["loc"])
            print(f"   • {field}: {error['msg']}", file=sys.stderr)
        print("\nPlease check your .env file or environment variables.", file=sys.stderr)
        sys.exit(1)

    # 1. CORS: wildcard is only tolerated in debug mode
    if not settings.debug:
        origins = [o.strip() for o in settings.allowed_origins.split(",")]
        if "*" in origins:
            _fail(
                "Wildcard CORS origin (*) detected in production mode.",
                "Set ALLOWED_ORIGINS to specific domains (comma-separated).",
            )

    # 2. Backend URL must be an HTTP(S) endpoint
    if not settings.supabase_url.startswith(("https://", "http://")):
        _fail(
            f"SUPABASE_URL must be an http(s) URL, got '{settings.supabase_url}'",
        )

    # 3. Read policy bounds
    if settings.request_timeout_ms <= 0:
        _fail("REQUEST_TIMEOUT_MS must be greater than 0")
    if settings.max_retries < 0:
        _fail("MAX_RETRIES must be 0 or greater")
    if settings.retry_backoff_ms < 0:
        _fail("RETRY_BACKOFF_MS must be 0 or greater")

    # 4. Logging
    if settings.log_level.upper() not in VALID_LOG_LEVELS:
        _fail(
            f"Invalid LOG_LEVEL '{settings.log_level}'",
            f"Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}",
        )

    print("✅ Environment validation passed")
    print(f"   App: {settings.app_name}")
    print(f"   Debug: {settings.debug}")
    if settings.is_backend_configured:
        print(f"   Backend: {settings.supabase_url}")
    else:
        print("   ⚠️  Backend: placeholder credentials, running on the in-memory fallback store")

    return settings


if __name__ == "__main__":
    validate_environment()
    print("\n✅ All environment variables are valid!")
