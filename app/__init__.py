# =============================================================================
# app/ - Novique API Web Layer
# =============================================================================
# - main.py: FastAPI app, CORS, router mounting, error handlers
# - config.py: Settings loaded from the environment
# - exceptions.py: Error hierarchy rendered as {detail, code, suggestion}
# - auth/: Roles, profile guards, API keys and session endpoints
# - routers/: One module per resource (blog, labs, CRM, Twilio, Jarvis, cron)
#
# Routers validate input and map results; the work happens in core/services.
# =============================================================================
