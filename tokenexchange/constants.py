"""Wire parameter names and default settings."""

GRANT_TYPE_AUTHORIZATION_CODE = "authorization_code"
GRANT_TYPE_REFRESH_TOKEN = "refresh_token"

PARAM_GRANT_TYPE = "grant_type"
PARAM_CODE = "code"
PARAM_REDIRECT_URI = "redirect_uri"
PARAM_REFRESH_TOKEN = "refresh_token"
PARAM_CODE_VERIFIER = "code_verifier"
PARAM_SCOPE = "scope"
PARAM_CLIENT_ID = "client_id"
PARAM_CLIENT_SECRET = "client_secret"

PARAM_ERROR = "error"
PARAM_ERROR_DESCRIPTION = "error_description"
PARAM_ERROR_URI = "error_uri"

CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"
CONTENT_TYPE_JSON = "application/json"

DEFAULT_CONNECT_TIMEOUT = 15.0
DEFAULT_READ_TIMEOUT = 10.0
DEFAULT_CLOCK_SKEW_SECONDS = 30
