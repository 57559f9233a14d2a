"""Consistent API response helpers.

Returns plain (body, status) tuples because Flask-RESTX and Flask error
handlers both serialise them to JSON.
"""


def success_response(data, status_code: int = 200):
    """Return the payload itself with an HTTP status code.

    Dashboards consume rows and aggregates directly, so no envelope is added.
    """
    return data, status_code


def error_response(message: str, status_code: int = 500, details=None):
    """Return the uniform ``{error, details?}`` body with an HTTP status code."""
    body = {"error": message}
    if details:
        body["details"] = details
    return body, status_code
