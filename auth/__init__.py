"""auth/ -- Authentication core for RecordGate.

Password hashing, session tokens, the registration and login flows, the
credential store, and the FastAPI access gate.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/. api/ imports from auth/, not the other way around.
"""
