"""
Core views providing infrastructure endpoints.

This module contains views that are not part of the ledger domain but are
essential for operating it, such as health checks.
"""

from django.db import DatabaseError, connection
from django.http import JsonResponse


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Used by container health checks, load balancers and uptime probes.
    The ledger store is the only hard dependency, so the check is a
    round-trip to the database.

    HTTP Status Codes:
        200: Database reachable
        503: Database unreachable

    Example Response:
        {"status": "healthy", "database": "connected"}
    """
    health_status = {"status": "healthy", "database": "unknown"}

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except DatabaseError:
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JsonResponse(health_status, status=status_code)
