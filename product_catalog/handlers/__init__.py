"""
Lambda handlers, one module per route. Each exposes ``handle(event, service)``
(async) and ``handler(event, context)`` (the Lambda entry point).
"""
