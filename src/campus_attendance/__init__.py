"""Campus Attendance package.

Organized by feature modules (auth, users, audit, dashboards) with a thin Flask
controller layer on top of service/repository layers.
"""
