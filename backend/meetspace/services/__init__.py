"""
MeetSpace Backend: Services Layer
===================================

What:  Business logic between routes (HTTP) and the store / identity provider.
How:   Services take request-scoped identifiers and plain field mappings,
       validate input before any provider call, and raise MeetSpaceError
       subclasses. Routes get them through FastAPI dependencies.

Service Inventory:
    - IdentityProvider (abstract): identity provider contract
    - FirebaseIdentityProvider: Firebase Admin SDK + Identity Toolkit REST
    - CredentialVerifier: bearer header → subject id
    - UserService: register, login, profile and account lifecycle
    - MeetingService: meeting CRUD for the authenticated subject
    - TwoPhaseOutcome: result of the non-atomic two-step operations
"""
