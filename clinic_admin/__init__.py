"""
Clinic admin client core

List, form and reference controllers that orchestrate the clinic admin
screens against the remote REST API.
"""
__version__ = "0.1.0"
