"""
Local mock of the clinic REST API, for development and integration tests
"""
