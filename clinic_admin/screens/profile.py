"""
Profile screen

Edits a staff user's profile (own profile by default, resolved through the
injected session) with an optional photo upload, plus a password change
form that resets after every successful change.
"""
import logging
from typing import Any, Dict, Optional

from clinic_admin.api.resources import PASSWORDS, PROFILES
from clinic_admin.api.store import RemoteStore
from clinic_admin.services.assets import AssetSource
from clinic_admin.services.fields import FieldSpec
from clinic_admin.services.form_controller import EntityFormController, FormSchema
from clinic_admin.services.session import SessionProvider
from clinic_admin.services.validation import EMAIL_PATTERN, MatchesPattern, MinLength, Required, SameAs

logger = logging.getLogger(__name__)

PROFILE_UNAVAILABLE = "No se pudo encontrar la información del perfil."

EMPTY_PROFILE = {
    "nombre": "",
    "apellido": "",
    "email": "",
    "telefono": "",
    "especialidad": None,
    "biografia": None,
    "foto_perfil": None,
}

PROFILE_FIELDS = [
    FieldSpec("nombre"),
    FieldSpec("apellido"),
    # The email identifies the account and cannot be changed here
    FieldSpec("email", read_only=True),
    FieldSpec("telefono"),
    FieldSpec("especialidad", nullable=True),
    FieldSpec("biografia", nullable=True),
    FieldSpec("foto_perfil", nullable=True),
]

PROFILE_RULES = [
    Required("nombre", "El nombre es requerido"),
    Required("apellido", "El apellido es requerido"),
    Required("email", "El email es requerido"),
    MatchesPattern("email", "El formato del email no es válido", pattern=EMAIL_PATTERN),
]

PROFILE_FORM = FormSchema(
    resource=PROFILES,
    fields=PROFILE_FIELDS,
    defaults=EMPTY_PROFILE,
    rules=PROFILE_RULES,
    asset_field="foto_perfil",
    asset_kind="perfil",
    payload_fields=("nombre", "apellido", "telefono", "especialidad", "biografia", "foto_perfil"),
    updated_message="Perfil actualizado correctamente",
    load_error="Error al cargar datos del perfil",
    not_found_message=PROFILE_UNAVAILABLE,
    save_error="Error al actualizar el perfil",
)

EMPTY_PASSWORD_CHANGE = {
    "current_password": "",
    "new_password": "",
    "confirm_password": "",
}

PASSWORD_RULES = [
    Required("current_password", "La contraseña actual es requerida"),
    Required("new_password", "La nueva contraseña es requerida"),
    MinLength("new_password", "La nueva contraseña debe tener al menos 8 caracteres", length=8),
    MatchesPattern("new_password", "La nueva contraseña debe contener al menos un número", pattern=r"\d"),
    MatchesPattern("new_password", "La nueva contraseña debe contener al menos una letra minúscula", pattern=r"[a-z]"),
    MatchesPattern("new_password", "La nueva contraseña debe contener al menos una letra mayúscula", pattern=r"[A-Z]"),
    SameAs("confirm_password", "Las contraseñas no coinciden", other="new_password"),
]


def password_payload(draft: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "currentPassword": draft["current_password"],
        "newPassword": draft["new_password"],
    }


PASSWORD_FORM = FormSchema(
    resource=PASSWORDS,
    fields=[FieldSpec(name) for name in EMPTY_PASSWORD_CHANGE],
    defaults=EMPTY_PASSWORD_CHANGE,
    rules=PASSWORD_RULES,
    payload_builder=password_payload,
    reset_after_update=True,
    updated_message="Contraseña actualizada correctamente",
    save_error="Error al cambiar la contraseña",
)


class ProfileEditor:
    """
    Profile form and password form for one user
    """

    def __init__(self, store: RemoteStore, session: SessionProvider):
        self.session = session
        self.form = EntityFormController(store, PROFILE_FORM)
        self.password = EntityFormController(store, PASSWORD_FORM)

    def target_id(self, user_id: Optional[str] = None) -> Optional[str]:
        return user_id or self.session.current_user_id()

    async def load(self, user_id: Optional[str] = None) -> bool:
        """
        Load the given user's profile, or the signed-in user's

        Without a target the forms stay uninitialized and the screen shows
        PROFILE_UNAVAILABLE.
        """
        target = self.target_id(user_id)
        if not target:
            logger.info("No user id available for the profile screen")
            return False
        self.password.start(entity_id=target)
        return await self.form.load_for_edit(target)

    async def select_photo(self, source: AssetSource, filename: Optional[str] = None) -> bool:
        return await self.form.select_asset(source, filename=filename)

    def remove_photo(self) -> None:
        self.form.remove_asset()

    async def save_profile(self) -> bool:
        return await self.form.submit()

    async def change_password(self) -> bool:
        return await self.password.submit()

    def close(self) -> None:
        self.form.close()
        self.password.close()
