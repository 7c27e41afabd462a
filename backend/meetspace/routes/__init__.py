"""
MeetSpace Backend: API Routes Package
=======================================

Route Inventory (prefix API_PREFIX, default /api/v1):
    - users.py:     POST   /users/register
                    POST   /users/login
                    POST   /users/request-password-reset
                    POST   /users/reset-password
                    GET    /users/profile               (bearer)
                    PUT    /users/profile               (bearer)
                    PUT    /users/email                 (bearer)
                    DELETE /users/profile               (bearer)
    - meetings.py:  POST   /meetings                    (bearer)
                    GET    /meetings                    (bearer)
                    GET    /meetings/{meeting_id}       (bearer)
                    PUT    /meetings/{meeting_id}       (bearer)
                    DELETE /meetings/{meeting_id}       (bearer)
    - health.py:    GET    /health                      (no prefix)

Routes stay thin: unpack the body, call the service, pick the status code.
"""
