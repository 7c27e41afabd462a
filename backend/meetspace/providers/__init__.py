"""
MeetSpace Backend: External Provider Handles
==============================================

What:  Process-wide client handles for the identity and document providers.
How:   Created once, on first use, and shared read-only by every request.
"""
