"""
Endpoint definitions for the Vault secret engines and auth methods.

Each module groups the endpoints of one engine together with small helper
coroutines that build an endpoint and execute it on a client.
"""
