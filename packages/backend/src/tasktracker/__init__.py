"""Task Tracker — multi-tenant projects and tasks over HTTP.

Users register, log in for a bearer token, and manage projects and the
tasks nested under them. Every project and task is visible only to the
user who owns it.
"""

__version__ = "0.1.0"
