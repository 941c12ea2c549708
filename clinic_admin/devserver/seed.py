"""
Demo data for the dev server

Seeds staff users (one admin, two doctors) and document templates so the
treatment editor has catalogs to work with. Existing data is never touched.
"""
import hashlib

from clinic_admin.devserver import storage

DEFAULT_PASSWORD = "Clinica123"

DEMO_USERS = [
    {
        "_id": "64b000000000000000000001",
        "nombre": "Ana",
        "apellido": "Pérez",
        "email": "admin@clinica.test",
        "telefono": "+54 11 5555-0001",
        "roles": ["admin"],
    },
    {
        "_id": "64b000000000000000000002",
        "nombre": "Lucía",
        "apellido": "Gómez",
        "email": "lgomez@clinica.test",
        "telefono": "+54 11 5555-0002",
        "especialidad": "Dermatología",
        "roles": ["medico"],
    },
    {
        "_id": "64b000000000000000000003",
        "nombre": "Martín",
        "apellido": "Ruiz",
        "email": "mruiz@clinica.test",
        "telefono": "+54 11 5555-0003",
        "especialidad": "Medicina Estética",
        "roles": ["medico"],
    },
]

DEMO_TEMPLATES = [
    {"_id": "64c000000000000000000001", "titulo": "Consentimiento toxina botulínica", "tipo": "consentimiento"},
    {"_id": "64c000000000000000000002", "titulo": "Consentimiento rellenos dérmicos", "tipo": "consentimiento"},
    {"_id": "64c000000000000000000003", "titulo": "Indicaciones post tratamiento", "tipo": "indicaciones"},
]


def hash_password(password: str) -> str:
    """
    Unsalted SHA-256, good enough for seeded demo accounts only

    Not a password storage scheme: a real server needs a salted, slow hash
    (bcrypt, argon2).
    """
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def seed_demo_data():
    """
    Write demo users and templates if their collections are empty
    """
    if not storage.list_records("usuarios"):
        for user in DEMO_USERS:
            storage.save_record("usuarios", {**user, "passwordHash": hash_password(DEFAULT_PASSWORD)})
    if not storage.list_records("templates"):
        for template in DEMO_TEMPLATES:
            storage.save_record("templates", template)
