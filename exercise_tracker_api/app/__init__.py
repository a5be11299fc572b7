"""
Application package initializer.

The API is split into small pieces: ``core`` holds configuration,
logging, errors and the store handle; ``schemas`` the request and
response contracts; ``services`` the business logic; and ``api``
the versioned routers that bind services to HTTP routes.
"""
